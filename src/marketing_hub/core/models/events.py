"""Stream events emitted by the agent backend.

The wire payload is a loosely-typed JSON object keyed by ``type``.  Each
known type gets its own model; anything else (missing ``type``, an
unrecognised one, or a known type whose fields fail validation) becomes an
:class:`UnknownEvent` that keeps the raw payload for display.

All models allow extra fields so :meth:`to_payload` can hand back exactly
what the server sent.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .constants import (
    CONNECTION_INTERRUPTED_MESSAGE,
    EVENT_TYPE_CHUNK,
    EVENT_TYPE_DONE,
    EVENT_TYPE_ERROR,
    EVENT_TYPE_PLATFORM,
    EVENT_TYPE_STATUS,
    EVENT_TYPE_TOOL_END,
    EVENT_TYPE_TOOL_START,
    EVENT_TYPE_WARN,
)


class BaseStreamEvent(BaseModel):
    """Common behaviour of every typed stream event."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    type: str

    def to_payload(self) -> dict[str, Any]:
        """Return the event as the JSON object it was (or would be) sent as."""
        payload = self.model_dump(by_alias=True, exclude_unset=True)
        return {"type": self.type, **payload}


class StatusEvent(BaseStreamEvent):
    """A named sub-task started on the server."""

    type: Literal["status"] = EVENT_TYPE_STATUS
    agent: str | None = Field(default=None, description="Active logical worker")
    step: str | None = Field(default=None, description="Step identifier")
    status: str | None = Field(default=None, description="Free-form status text")


class ChunkEvent(BaseStreamEvent):
    """Incremental fragment of free-text output."""

    type: Literal["chunk"] = EVENT_TYPE_CHUNK
    content: str = Field(default="", description="Text fragment")


class PlatformEvent(BaseStreamEvent):
    """Per-platform sub-job boundary in multi-platform generation."""

    type: Literal["platform"] = EVENT_TYPE_PLATFORM
    action: Literal["started", "completed"] = Field(description="Boundary kind")
    platform: str = Field(description="Platform name, e.g. 'facebook'")
    variant_id: str | None = Field(
        default=None, alias="variantId", description="Created variant record id"
    )


class ToolStartEvent(BaseStreamEvent):
    """External tool invocation began."""

    type: Literal["tool_start"] = EVENT_TYPE_TOOL_START
    tool: str = Field(description="Tool name")
    input: Any = Field(default=None, description="Tool input")


class ToolEndEvent(BaseStreamEvent):
    """External tool invocation finished."""

    type: Literal["tool_end"] = EVENT_TYPE_TOOL_END
    tool: str = Field(description="Tool name")
    output: Any = Field(default=None, description="Tool output")


class DoneEvent(BaseStreamEvent):
    """Terminal success; result fields depend on the operation."""

    type: Literal["done"] = EVENT_TYPE_DONE


class ErrorEvent(BaseStreamEvent):
    """Terminal failure reported by the server."""

    type: Literal["error"] = EVENT_TYPE_ERROR
    error: str | None = Field(default=None, description="Error message")
    step: str | None = Field(default=None, description="Step that failed")
    message: str | None = Field(default=None, description="Alternate message")


class WarnEvent(BaseStreamEvent):
    """Client-side advisory raised by the interruption fallback."""

    type: Literal["warn"] = EVENT_TYPE_WARN
    message: str = Field(default=CONNECTION_INTERRUPTED_MESSAGE)


class UnknownEvent(BaseModel):
    """Catch-all for payloads that match no known variant."""

    payload: dict[str, Any] = Field(default_factory=dict)

    @property
    def type(self) -> str | None:
        value = self.payload.get("type")
        return value if isinstance(value, str) else None

    def to_payload(self) -> dict[str, Any]:
        return dict(self.payload)


StreamEvent = (
    StatusEvent
    | ChunkEvent
    | PlatformEvent
    | ToolStartEvent
    | ToolEndEvent
    | DoneEvent
    | ErrorEvent
    | WarnEvent
    | UnknownEvent
)

_EVENT_MODELS: dict[str, type[BaseStreamEvent]] = {
    EVENT_TYPE_STATUS: StatusEvent,
    EVENT_TYPE_CHUNK: ChunkEvent,
    EVENT_TYPE_PLATFORM: PlatformEvent,
    EVENT_TYPE_TOOL_START: ToolStartEvent,
    EVENT_TYPE_TOOL_END: ToolEndEvent,
    EVENT_TYPE_DONE: DoneEvent,
    EVENT_TYPE_ERROR: ErrorEvent,
    EVENT_TYPE_WARN: WarnEvent,
}


def parse_event(payload: dict[str, Any]) -> StreamEvent:
    """Map a decoded JSON object onto its event model.

    Never raises: payloads that do not fit a known variant are wrapped in
    :class:`UnknownEvent`.
    """
    event_type = payload.get("type")
    model = _EVENT_MODELS.get(event_type) if isinstance(event_type, str) else None
    if model is None:
        return UnknownEvent(payload=payload)
    try:
        return model.model_validate(payload)
    except ValidationError:
        return UnknownEvent(payload=payload)
