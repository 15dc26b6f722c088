"""Line-buffered decoder for the agent backend's event stream.

The backend only ever writes ``data: <json>\\n`` lines; ``event:``,
``id:`` and ``retry:`` fields are not used, and events are not required
to be separated by a blank line.  Bytes are decoded incrementally so a
multi-byte UTF-8 sequence split across two network chunks is rebuilt
rather than mangled.
"""

from __future__ import annotations

import codecs
import json
import logging
from collections.abc import AsyncIterable, AsyncIterator, Callable
from typing import Any

import httpx

logger = logging.getLogger(__name__)

DATA_PREFIX = "data: "
_ENCODING = "utf-8"


def try_parse_event(line: str) -> dict[str, Any] | None:
    """Parse one ``data:`` line into its JSON object.

    Returns ``None`` for lines without the prefix, malformed JSON, and JSON
    values that are not objects.  Never raises.
    """
    if not line.startswith(DATA_PREFIX):
        return None
    data_str = line[len(DATA_PREFIX) :]
    try:
        parsed = json.loads(data_str)
    except ValueError:
        logger.debug("Dropping malformed event line: %r", data_str)
        return None
    if not isinstance(parsed, dict):
        logger.debug("Dropping non-object event payload: %r", data_str)
        return None
    return parsed


class LineDecoder:
    """Incremental bytes-to-events decoder.

    Feed raw chunks in arrival order; each call returns the events completed
    by that chunk.  Call :meth:`flush` once the stream has ended to pick up
    a final line sent without a trailing newline.
    """

    def __init__(self) -> None:
        self._decoder = codecs.getincrementaldecoder(_ENCODING)(errors="replace")
        self._buffer = ""

    def feed(self, chunk: bytes) -> list[dict[str, Any]]:
        self._buffer += self._decoder.decode(chunk)
        *lines, self._buffer = self._buffer.split("\n")
        return _parse_lines(lines)

    def flush(self) -> list[dict[str, Any]]:
        self._buffer += self._decoder.decode(b"", final=True)
        *lines, tail = self._buffer.split("\n")
        self._buffer = ""
        return _parse_lines([*lines, tail])


def _parse_lines(lines: list[str]) -> list[dict[str, Any]]:
    events = []
    for line in lines:
        event = try_parse_event(line)
        if event is not None:
            events.append(event)
    return events


async def iter_sse_events(
    chunks: AsyncIterable[bytes],
) -> AsyncIterator[dict[str, Any]]:
    """Yield decoded event objects from an async byte stream, in order."""
    decoder = LineDecoder()
    async for chunk in chunks:
        for event in decoder.feed(chunk):
            yield event
    for event in decoder.flush():
        yield event


async def stream_sse(
    response: httpx.Response,
    on_event: Callable[[dict[str, Any]], None],
) -> None:
    """Read an event-stream response body and dispatch each parsed event.

    ``on_event`` is called exactly once per decoded line, before the next
    line is looked at.
    """
    async for event in iter_sse_events(response.aiter_bytes()):
        on_event(event)
