"""Tests for the terminal front end."""

import asyncio
import io
import json
import threading
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from conftest import BASE_URL, RecordingBackend, sse_line, sse_response
from hub_cli.__main__ import parse_args
from hub_cli.formatter import ActivityFormatter
from hub_cli.runner import HubCLI, main
from marketing_hub.configs.config import AppConfig
from marketing_hub.configs.system import AgentConfig
from marketing_hub.core.activity import ActivityEntry
from marketing_hub.core.models import parse_event


def _cli(handler, answers: str = "", show_chunks: bool = False):
    output = io.StringIO()
    config = AppConfig(agent=AgentConfig(base_url=BASE_URL))
    cli = HubCLI(
        config,
        input_stream=io.StringIO(answers),
        output_stream=output,
        show_chunks=show_chunks,
        transport=httpx.MockTransport(handler),
    )
    return cli, output


# ---------------------------------------------------------------------------
# ActivityFormatter
# ---------------------------------------------------------------------------


class TestActivityFormatter:
    def test_prints_entry(self):
        output = io.StringIO()
        formatter = ActivityFormatter(output)
        formatter.handle_entry(
            parse_event({"type": "status"}), ActivityEntry("⏳", "c", "System: go")
        )
        assert output.getvalue() == "⏳ System: go\n"

    def test_chunks_hidden_by_default(self):
        output = io.StringIO()
        formatter = ActivityFormatter(output)
        chunk = parse_event({"type": "chunk", "content": "x"})
        formatter.handle_entry(chunk, ActivityEntry("📝", "c", 'Generating: "x"'))
        formatter.show_result(None)
        assert "Generating" not in output.getvalue()
        assert "(1 text chunks received)" in output.getvalue()

    def test_chunks_shown_when_enabled(self):
        output = io.StringIO()
        formatter = ActivityFormatter(output, show_chunks=True)
        chunk = parse_event({"type": "chunk", "content": "x"})
        formatter.handle_entry(chunk, ActivityEntry("📝", "c", 'Generating: "x"'))
        assert output.getvalue() == '📝 Generating: "x"\n'

    def test_result_is_pretty_json(self):
        output = io.StringIO()
        ActivityFormatter(output).show_result({"type": "done", "id": "mc-1"})
        text = output.getvalue()
        assert "Result:" in text
        assert json.loads(text.split("Result:\n", 1)[1]) == {"type": "done", "id": "mc-1"}


# ---------------------------------------------------------------------------
# HubCLI
# ---------------------------------------------------------------------------


class TestHubCLI:
    @pytest.mark.asyncio
    async def test_successful_run(self):
        cli, output = _cli(
            lambda r: sse_response(
                [
                    sse_line({"type": "status", "agent": "Writer", "step": "draft"}),
                    sse_line({"type": "chunk", "content": "Hello"}),
                    sse_line({"type": "done", "masterContentId": "mc-1"}),
                ]
            )
        )

        code = await cli.run(
            lambda g: g.start_generating_master_content("camp-1", "ws-1")
        )

        text = output.getvalue()
        assert code == 0
        assert "⏳ Writer: draft" in text
        assert "🎉 ✓ Generation completed successfully! ID: mc-1" in text
        assert '"masterContentId": "mc-1"' in text
        assert cli.generator.client.client.is_closed

    @pytest.mark.asyncio
    async def test_failure_without_retry(self):
        backend = RecordingBackend(lambda r: httpx.Response(500, text="boom"))
        cli, output = _cli(backend, answers="n\n")

        code = await cli.run(lambda g: g.start_generating_brand_identity("w1"))

        assert code == 1
        assert "Generation failed" in output.getvalue()
        assert len(backend.requests) == 1

    @pytest.mark.asyncio
    async def test_retry_runs_again(self):
        replies = iter(
            [
                httpx.Response(503, text="busy"),
                sse_response([sse_line({"type": "done", "ok": True})]),
            ]
        )
        backend = RecordingBackend(lambda r: next(replies))
        cli, output = _cli(backend, answers="y\n")

        code = await cli.run(lambda g: g.start_generating_brand_identity("w1"))

        assert code == 0
        assert len(backend.requests) == 2
        assert '"ok": true' in output.getvalue()

    @pytest.mark.asyncio
    async def test_retry_prompt_does_not_block_event_loop(self):
        class SlowInput:
            def __init__(self):
                self.answered = threading.Event()
                self.released_by_loop = False

            def readline(self) -> str:
                self.released_by_loop = self.answered.wait(timeout=2)
                return "n\n"

        slow_input = SlowInput()
        output = io.StringIO()
        cli = HubCLI(
            AppConfig(agent=AgentConfig(base_url=BASE_URL)),
            input_stream=slow_input,
            output_stream=output,
            transport=httpx.MockTransport(lambda r: httpx.Response(500)),
        )

        async def answer_when_prompted():
            while "Retry?" not in output.getvalue():
                await asyncio.sleep(0.01)
            slow_input.answered.set()

        code, _ = await asyncio.gather(
            cli.run(lambda g: g.start_generating_brand_identity("w1")),
            answer_when_prompted(),
        )

        assert code == 1
        assert slow_input.released_by_loop is True

    @pytest.mark.asyncio
    async def test_interruption_is_not_a_failure(self):
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        cli, output = _cli(refuse)
        code = await cli.run(lambda g: g.start_generating_master_content("c", "w"))

        assert code == 0
        assert "⚠️ Connection interrupted" in output.getvalue()
        assert "Generation failed" not in output.getvalue()

    @pytest.mark.asyncio
    async def test_health(self):
        cli, output = _cli(lambda r: httpx.Response(200))
        assert await cli.health() == 0
        assert "reachable" in output.getvalue()

    @pytest.mark.asyncio
    async def test_health_unreachable(self):
        cli, output = _cli(lambda r: httpx.Response(503))
        assert await cli.health() == 1
        assert "unreachable" in output.getvalue()


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------


class TestParseArgs:
    def test_variants_command(self):
        args = parse_args(
            [
                "--base-url",
                "http://x",
                "variants",
                "--master-content-id",
                "master-123",
                "--platforms",
                "facebook",
                "instagram",
                "--workspace-id",
                "ws",
            ]
        )
        assert args.command == "variants"
        assert args.base_url == "http://x"
        assert args.platforms == ["facebook", "instagram"]
        assert args.language is None
        assert callable(args.build(args))

    def test_health_command(self):
        args = parse_args(["health"])
        assert args.command == "health"

    def test_missing_required_argument(self):
        with pytest.raises(SystemExit):
            parse_args(["brand-identity"])


# ---------------------------------------------------------------------------
# main
# ---------------------------------------------------------------------------


class TestMain:
    @pytest.mark.asyncio
    async def test_health_with_base_url_override(self):
        with (
            patch("hub_cli.runner.setup_logging") as setup_logging,
            patch.object(HubCLI, "health", AsyncMock(return_value=0)) as health,
            patch.object(HubCLI, "run", AsyncMock(return_value=1)) as run,
        ):
            code = await main(None, base_url="http://override", debug=True)

        assert code == 0
        health.assert_awaited_once()
        run.assert_not_called()
        assert setup_logging.call_args.args[0].level == "DEBUG"

    @pytest.mark.asyncio
    async def test_operation_uses_overridden_backend(self):
        seen: list[str] = []

        async def fake_run(self, start):
            seen.append(self.generator.client.url("/health"))
            return 0

        with (
            patch("hub_cli.runner.setup_logging"),
            patch.object(HubCLI, "run", fake_run),
        ):
            code = await main(lambda g: None, base_url="http://override/")

        assert code == 0
        assert seen == ["http://override/health"]
