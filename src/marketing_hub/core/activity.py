"""Activity log view model.

Turns session events into display rows (icon, colour class, message) and
tracks the "this job runs on the server" notice shown when a run has been
loading for a long time.  Nothing here touches the network.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from marketing_hub.core.models import (
    CONNECTION_INTERRUPTED_MESSAGE,
    EVENT_TYPE_CHUNK,
    EVENT_TYPE_DONE,
    EVENT_TYPE_ERROR,
    EVENT_TYPE_PLATFORM,
    EVENT_TYPE_STATUS,
    EVENT_TYPE_TOOL_END,
    EVENT_TYPE_TOOL_START,
    EVENT_TYPE_WARN,
    PLATFORM_ACTION_STARTED,
    StreamEvent,
)
from marketing_hub.core.session import GenerationSession

LONG_RUNNING_NOTE = (
    "This job is running on the server. "
    "You can safely close this window and check results later."
)
EMPTY_LOG_PLACEHOLDER = 'No activity yet. Click "Generate via AI" to start.'
DEFAULT_CHUNK_PREVIEW = 50

_ICONS = {
    EVENT_TYPE_STATUS: "⏳",
    EVENT_TYPE_CHUNK: "📝",
    EVENT_TYPE_PLATFORM: "🌐",
    EVENT_TYPE_TOOL_START: "🔧",
    EVENT_TYPE_TOOL_END: "✅",
    EVENT_TYPE_WARN: "⚠️",
    EVENT_TYPE_DONE: "🎉",
    EVENT_TYPE_ERROR: "❌",
}
_DEFAULT_ICON = "📌"

_COLORS = {
    EVENT_TYPE_STATUS: "text-blue-600",
    EVENT_TYPE_CHUNK: "text-gray-600",
    EVENT_TYPE_PLATFORM: "text-purple-600",
    EVENT_TYPE_TOOL_START: "text-green-600",
    EVENT_TYPE_TOOL_END: "text-green-600",
    EVENT_TYPE_DONE: "text-green-700 font-semibold",
    EVENT_TYPE_WARN: "text-yellow-700 font-semibold",
    EVENT_TYPE_ERROR: "text-red-600 font-semibold",
}
_DEFAULT_COLOR = "text-gray-500"


@dataclass(frozen=True)
class ActivityEntry:
    """One rendered row of the activity log."""

    icon: str
    color_class: str
    message: str


@dataclass(frozen=True)
class ActivityView:
    entries: list[ActivityEntry]
    processing: bool
    long_running_note: str | None
    placeholder: str | None


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _format_message(payload: dict[str, Any], preview_length: int) -> str:
    event_type = payload.get("type")

    if event_type == EVENT_TYPE_STATUS:
        agent = payload.get("agent") or "System"
        return f"{agent}: {_text(payload.get('step') or payload.get('status'))}"

    if event_type == EVENT_TYPE_CHUNK:
        content = _text(payload.get("content"))
        suffix = "..." if len(content) > preview_length else ""
        return f'Generating: "{content[:preview_length]}{suffix}"'

    if event_type == EVENT_TYPE_PLATFORM:
        action = (
            "started"
            if payload.get("action") == PLATFORM_ACTION_STARTED
            else "completed"
        )
        message = f"Platform {action}: {_text(payload.get('platform'))}"
        if payload.get("variantId"):
            message += f" (ID: {payload['variantId']})"
        return message

    if event_type == EVENT_TYPE_TOOL_START:
        return f"Tool: {_text(payload.get('tool'))} - Started"

    if event_type == EVENT_TYPE_TOOL_END:
        return f"Tool: {_text(payload.get('tool'))} - Completed"

    if event_type == EVENT_TYPE_DONE:
        message = "✓ Generation completed successfully!"
        if payload.get("masterContentId"):
            message += f" ID: {payload['masterContentId']}"
        if payload.get("platformCount"):
            message += f" ({payload['platformCount']} variants)"
        return message

    if event_type == EVENT_TYPE_ERROR:
        message = f"Error: {_text(payload.get('error') or payload.get('message'))}"
        if payload.get("step"):
            message += f" ({payload['step']})"
        return message

    if event_type == EVENT_TYPE_WARN:
        return _text(payload.get("message")) or CONNECTION_INTERRUPTED_MESSAGE

    return json.dumps(payload, ensure_ascii=False, default=str)


def describe_event(
    event: StreamEvent, preview_length: int = DEFAULT_CHUNK_PREVIEW
) -> ActivityEntry:
    """Map one event onto its display row.  Never raises."""
    payload = event.to_payload()
    event_type = payload.get("type")
    key = event_type if isinstance(event_type, str) else ""
    return ActivityEntry(
        icon=_ICONS.get(key, _DEFAULT_ICON),
        color_class=_COLORS.get(key, _DEFAULT_COLOR),
        message=_format_message(payload, preview_length),
    )


def build_activity_view(
    events: Sequence[StreamEvent],
    is_loading: bool,
    show_long_running_note: bool = False,
    preview_length: int = DEFAULT_CHUNK_PREVIEW,
) -> ActivityView:
    """Render the whole log for the current session state."""
    return ActivityView(
        entries=[describe_event(event, preview_length) for event in events],
        processing=is_loading,
        long_running_note=(
            LONG_RUNNING_NOTE if is_loading and show_long_running_note else None
        ),
        placeholder=EMPTY_LOG_PLACEHOLDER if not events else None,
    )


class LongRunningNotice:
    """Shows a notice once loading has lasted ``delay`` seconds.

    Loading must be continuous: any stop hides the notice and disarms the
    timer.  The timer is only armed on a not-loading to loading edge, so it
    fires at most once per run.
    """

    def __init__(self, delay: float, on_change: Callable[[bool], None] | None = None):
        self.delay = delay
        self.visible = False
        self._on_change = on_change
        self._loading = False
        self._timer: asyncio.TimerHandle | None = None

    def update(self, is_loading: bool) -> None:
        if is_loading == self._loading:
            return
        self._loading = is_loading
        if is_loading:
            loop = asyncio.get_running_loop()
            self._timer = loop.call_later(self.delay, self._show)
        else:
            self._cancel_timer()
            self._set_visible(False)

    def _show(self) -> None:
        self._timer = None
        if self._loading:
            self._set_visible(True)

    def _set_visible(self, visible: bool) -> None:
        if visible == self.visible:
            return
        self.visible = visible
        if self._on_change is not None:
            self._on_change(visible)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def close(self) -> None:
        self._cancel_timer()


class ActivityLog:
    """Keeps a rendered activity view in step with a session.

    ``on_entry`` receives each new event with its row as it is appended;
    ``on_note`` receives the long-running notice text when it appears.
    """

    def __init__(
        self,
        session: GenerationSession,
        long_running_after: float = 30.0,
        preview_length: int = DEFAULT_CHUNK_PREVIEW,
        on_entry: Callable[[StreamEvent, ActivityEntry], None] | None = None,
        on_note: Callable[[str], None] | None = None,
    ):
        self.session = session
        self.preview_length = preview_length
        self._on_entry = on_entry
        self._on_note = on_note
        self._rendered = 0
        self.notice = LongRunningNotice(long_running_after, self._notice_changed)
        self._unsubscribe = session.subscribe(self._session_changed)
        self._session_changed(session)

    @property
    def view(self) -> ActivityView:
        return build_activity_view(
            self.session.events,
            self.session.is_loading,
            self.notice.visible,
            self.preview_length,
        )

    def _session_changed(self, session: GenerationSession) -> None:
        if len(session.events) < self._rendered:
            # Session was reset.
            self._rendered = 0
        for event in session.events[self._rendered :]:
            entry = describe_event(event, self.preview_length)
            if self._on_entry is not None:
                self._on_entry(event, entry)
        self._rendered = len(session.events)
        self.notice.update(session.is_loading)

    def _notice_changed(self, visible: bool) -> None:
        if visible and self._on_note is not None:
            self._on_note(LONG_RUNNING_NOTE)

    def close(self) -> None:
        self._unsubscribe()
        self.notice.close()
