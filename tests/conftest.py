"""Shared fixtures: a fake agent backend built on ``httpx.MockTransport``."""

import json
from collections.abc import AsyncIterator, Callable, Iterable

import httpx
import pytest

from marketing_hub.configs.system import AgentConfig
from marketing_hub.core.client import AgentClient
from marketing_hub.core.generator import ContentGenerator

BASE_URL = "http://agents.test"

Handler = Callable[[httpx.Request], httpx.Response]


def sse_line(payload: dict) -> bytes:
    return f"data: {json.dumps(payload)}\n".encode()


async def _chunks(parts: Iterable[bytes]) -> AsyncIterator[bytes]:
    for part in parts:
        yield part


def sse_response(parts: Iterable[bytes], status_code: int = 200) -> httpx.Response:
    """Streaming response that delivers *parts* as separate chunks."""
    return httpx.Response(
        status_code,
        headers={"Content-Type": "text/event-stream"},
        content=_chunks(list(parts)),
    )


class RecordingBackend:
    """MockTransport handler that records requests and replays a reply."""

    def __init__(self, reply: Callable[[httpx.Request], httpx.Response]):
        self.reply = reply
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.reply(request)

    @property
    def last_body(self) -> dict:
        return json.loads(self.requests[-1].content)


@pytest.fixture
def agent_config() -> AgentConfig:
    return AgentConfig(base_url=BASE_URL)


@pytest.fixture
def make_client(agent_config: AgentConfig) -> Callable[[Handler], AgentClient]:
    def factory(handler: Handler) -> AgentClient:
        return AgentClient(agent_config, transport=httpx.MockTransport(handler))

    return factory


@pytest.fixture
def make_generator(
    agent_config: AgentConfig, make_client: Callable[[Handler], AgentClient]
) -> Callable[[Handler], ContentGenerator]:
    def factory(handler: Handler) -> ContentGenerator:
        return ContentGenerator(agent_config, make_client(handler))

    return factory
