"""Activity formatter for displaying generation progress in a terminal."""

import json
from typing import Any, TextIO

from marketing_hub.core.activity import ActivityEntry
from marketing_hub.core.models import EVENT_TYPE_CHUNK, StreamEvent


class ActivityFormatter:
    """Writes activity log rows and the final outcome to a text stream."""

    def __init__(self, output: TextIO, show_chunks: bool = False):
        """Initialize the formatter.

        Parameters
        ----------
        output
            File-like object to write output to.
        show_chunks
            Whether to print a row for every streamed text chunk.
        """
        self.output = output
        self.show_chunks = show_chunks
        self.skipped_chunks = 0

    def handle_entry(self, event: StreamEvent, entry: ActivityEntry) -> None:
        """Display one activity row."""
        if event.type == EVENT_TYPE_CHUNK and not self.show_chunks:
            self.skipped_chunks += 1
            return
        self._print(f"{entry.icon} {entry.message}\n")

    def show_note(self, note: str) -> None:
        self._print(f"\nℹ️  {note}\n\n")

    def show_result(self, content: dict[str, Any] | None) -> None:
        """Print the ``done`` payload, if there is one."""
        if self.skipped_chunks:
            self._print(f"({self.skipped_chunks} text chunks received)\n")
        if content is None:
            return
        self._print("\nResult:\n")
        self._print(json.dumps(content, indent=2, ensure_ascii=False, default=str))
        self._print("\n")

    def show_error(self, error: str) -> None:
        self._print(f"\n❌ Generation failed: {error}\n")

    def _print(self, text: str) -> None:
        """Print text to output."""
        self.output.write(text)
        self.output.flush()
