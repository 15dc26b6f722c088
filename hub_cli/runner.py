"""Run one generation operation from the terminal."""

import asyncio
import logging
import sys
from collections.abc import Callable
from typing import TextIO

import httpx

from marketing_hub.configs.config import AppConfig
from marketing_hub.core.activity import ActivityLog
from marketing_hub.core.client import AgentClient
from marketing_hub.core.generator import ContentGenerator, GenerationHandle
from marketing_hub.infra.logging import setup_logging

from .formatter import ActivityFormatter

logger = logging.getLogger(__name__)

StartFn = Callable[[ContentGenerator], GenerationHandle]


class HubCLI:
    """Terminal front end for the agent backend."""

    def __init__(
        self,
        config: AppConfig,
        input_stream: TextIO = sys.stdin,
        output_stream: TextIO = sys.stdout,
        show_chunks: bool = False,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the CLI.

        Parameters
        ----------
        config
            Application configuration.
        input_stream
            Input stream for the retry prompt (default: stdin).
        output_stream
            Output stream for activity rows (default: stdout).
        show_chunks
            Whether to print every streamed text chunk.
        transport
            Optional httpx transport, mainly for tests.
        """
        self.config = config
        self.input_stream = input_stream
        self.output_stream = output_stream
        self.show_chunks = show_chunks
        self.generator = ContentGenerator(
            config.agent, AgentClient(config.agent, transport=transport)
        )

    async def health(self) -> int:
        """Print backend reachability; exit code 0 when healthy."""
        try:
            healthy = await self.generator.check_health()
        finally:
            await self.generator.aclose()
        status = "reachable" if healthy else "unreachable"
        self._print(f"Agent backend at {self.config.agent.base_url} is {status}\n")
        return 0 if healthy else 1

    async def run(self, start: StartFn) -> int:
        """Run an operation until it settles, offering a retry on failure."""
        try:
            while True:
                formatter = ActivityFormatter(self.output_stream, self.show_chunks)
                await self._run_once(start, formatter)

                if self.generator.error is None:
                    formatter.show_result(self.generator.generated_content)
                    return 0

                formatter.show_error(self.generator.error)
                if not await self._confirm_retry():
                    return 1
                self.generator.reset()
        finally:
            await self.generator.aclose()

    async def _run_once(self, start: StartFn, formatter: ActivityFormatter) -> None:
        activity = ActivityLog(
            self.generator.session,
            long_running_after=self.config.activity.long_running_after,
            preview_length=self.config.activity.chunk_preview_length,
            on_entry=formatter.handle_entry,
            on_note=formatter.show_note,
        )
        try:
            handle = start(self.generator)
            await handle
        except asyncio.CancelledError:
            self.generator.reset()
            self._print("\nCancelled.\n")
            raise
        finally:
            activity.close()

    async def _confirm_retry(self) -> bool:
        """Ask whether to retry; EOF counts as no."""
        self._print("Retry? [y/N] ")
        line = await asyncio.to_thread(self.input_stream.readline)
        return line.strip().lower() in ("y", "yes")

    def _print(self, text: str) -> None:
        """Print text to output stream."""
        self.output_stream.write(text)
        self.output_stream.flush()


async def main(
    start: StartFn | None,
    base_url: str | None = None,
    debug: bool = False,
    json_logs: bool = False,
    show_chunks: bool = False,
) -> int:
    """Main entry point for the CLI.

    Parameters
    ----------
    start
        Starts the chosen operation on a generator; ``None`` runs the
        health check instead.
    base_url
        Overrides the configured agent backend URL.
    debug
        Enable debug logging.
    json_logs
        Emit logs as JSON lines.
    show_chunks
        Print every streamed text chunk.
    """
    config = AppConfig()
    logging_config = config.logging.model_copy(
        update={
            "level": "DEBUG" if debug else config.logging.level,
            "json_output": json_logs or config.logging.json_output,
        }
    )
    setup_logging(logging_config)

    if base_url:
        config.agent = config.agent.model_copy(update={"base_url": base_url})

    cli = HubCLI(config, show_chunks=show_chunks)
    if start is None:
        return await cli.health()
    return await cli.run(start)
