"""Generation-session state driven by decoded stream events.

A session moves ``IDLE -> RUNNING -> SETTLED``.  It owns four pieces of
observable state: the ordered event log, the loading flag, an optional
error message and the ``done`` payload.  Only the generator that owns the
session writes to it.

Policy for a dropped connection: the job keeps running server-side, so an
interruption appends a ``warn`` event and stops loading without setting
``error``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import Enum
from typing import Any

from marketing_hub.core.models import (
    CONNECTION_INTERRUPTED_MESSAGE,
    DEFAULT_ERROR_MESSAGE,
    EVENT_TYPE_DONE,
    EVENT_TYPE_ERROR,
    StreamEvent,
    WarnEvent,
    parse_event,
)

logger = logging.getLogger(__name__)

SessionListener = Callable[["GenerationSession"], None]


class SessionState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    SETTLED = "settled"


class GenerationSession:
    """Observable state of one generation run."""

    def __init__(self) -> None:
        self.state = SessionState.IDLE
        self.events: list[StreamEvent] = []
        self.is_loading = False
        self.error: str | None = None
        self.generated_content: dict[str, Any] | None = None
        self._listeners: list[SessionListener] = []

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Call *listener* after every state change; returns an unsubscriber."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def reset(self) -> None:
        self.state = SessionState.IDLE
        self.events = []
        self.is_loading = False
        self.error = None
        self.generated_content = None
        self._notify()

    def begin(self) -> None:
        """Clear prior state and enter ``RUNNING``."""
        self.state = SessionState.RUNNING
        self.events = []
        self.is_loading = True
        self.error = None
        self.generated_content = None
        self._notify()

    def handle_event(self, payload: dict[str, Any]) -> StreamEvent:
        """Append one decoded event and apply terminal transitions."""
        event = parse_event(payload)
        self.events.append(event)

        if self.state is SessionState.RUNNING:
            if event.type == EVENT_TYPE_DONE:
                self.generated_content = event.to_payload()
                self._settle()
            elif event.type == EVENT_TYPE_ERROR:
                self.error = _error_text(payload)
                self._settle()
        elif self.state is SessionState.SETTLED:
            # The protocol does not forbid trailing events; keep them visible
            # but leave the settled result alone.
            logger.debug("Event %r received after session settled", event.type)

        self._notify()
        return event

    def interrupt(self) -> None:
        """The connection dropped; the server-side job is presumed alive."""
        if self.state is not SessionState.RUNNING:
            return
        self.events.append(WarnEvent(message=CONNECTION_INTERRUPTED_MESSAGE))
        self._settle()
        self._notify()

    def fail(self, message: str) -> None:
        if self.state is not SessionState.RUNNING:
            return
        self.error = message
        self._settle()
        self._notify()

    def finish(self) -> None:
        """The stream closed; settle if no terminal event arrived."""
        if self.state is not SessionState.RUNNING:
            return
        logger.debug("Stream closed without a terminal event")
        self._settle()
        self._notify()

    def _settle(self) -> None:
        self.state = SessionState.SETTLED
        self.is_loading = False


def _error_text(payload: dict[str, Any]) -> str:
    message = payload.get("error") or payload.get("message")
    if not message:
        return DEFAULT_ERROR_MESSAGE
    return message if isinstance(message, str) else str(message)
