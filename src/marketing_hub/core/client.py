"""HTTP client for the AI-agent backend.

Every generation endpoint has the same shape: POST a JSON body, get back
an event stream.  :class:`AgentClient` exposes one coroutine per endpoint
that feeds decoded events into a callback; cancelling the awaiting task
aborts the request and closes the stream.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any
from urllib.parse import quote

import httpx

from marketing_hub.configs.system import AgentConfig
from marketing_hub.core.models import (
    AgentRequest,
    BatchPostsRequest,
    BrandIdentityRequest,
    ChatRequest,
    ContentBriefsRequest,
    CustomerProfileRequest,
    MarketingStrategyRequest,
    MasterContentRequest,
    PlatformVariantsRequest,
    WorksheetRequest,
)
from marketing_hub.core.sse import stream_sse

logger = logging.getLogger(__name__)

EventCallback = Callable[[dict[str, Any]], None]

# Endpoint paths, relative to the configured base URL.
PATH_MASTER_CONTENT = "generate-master-content"
PATH_PLATFORM_VARIANTS = "generate-platform-variants"
PATH_BATCH_POSTS = "batch-generate-posts"
PATH_WORKSHEET = "generate-worksheet"
PATH_BRAND_IDENTITY = "generate-brand-identity"
PATH_MARKETING_STRATEGY = "generate-marketing-strategy"
PATH_CONTENT_BRIEFS = "generate-content-briefs"
PATH_CUSTOMER_PROFILE = "generate-customer-profile"
PATH_CHAT = "chat"
PATH_HEALTH = "health"

# Transport failures meaning "the connection broke", as opposed to a bad
# request or a server-side error.  The job keeps running on the server.
INTERRUPTION_ERRORS: tuple[type[Exception], ...] = (
    httpx.NetworkError,
    httpx.RemoteProtocolError,
    httpx.ConnectTimeout,
)


class AgentAPIError(Exception):
    """Raised when the backend answers a generation request with non-2xx."""

    def __init__(self, status_code: int, body: str = "") -> None:
        message = f"Agent API error: {status_code}"
        if body:
            message = f"{message} {body}"
        super().__init__(message)
        self.status_code = status_code
        self.body = body


def is_interruption(exc: BaseException) -> bool:
    """True when *exc* means the connection dropped, not that the job failed."""
    return isinstance(exc, INTERRUPTION_ERRORS)


class AgentClient:
    """Client for the agent backend's streaming generation endpoints."""

    def __init__(
        self,
        config: AgentConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the API client.

        Parameters
        ----------
        config
            Agent backend settings (base URL, timeouts, auth token).
        transport
            Optional httpx transport, mainly for tests.
        """
        self.config = config
        # No read deadline: the server decides when a generation is over.
        self.client = httpx.AsyncClient(
            timeout=httpx.Timeout(None, connect=config.connect_timeout),
            transport=transport,
        )

    def url(self, path: str) -> str:
        """Join the configured base URL with an endpoint path."""
        return f"{self.config.base_url.rstrip('/')}/{path.lstrip('/')}"

    def _headers(self, json_body: bool = True) -> dict[str, str]:
        headers = {"Content-Type": "application/json"} if json_body else {}
        if self.config.auth_token is not None:
            token = self.config.auth_token.get_secret_value()
            if token:
                headers["Authorization"] = f"Bearer {token}"
        return headers

    async def post_stream(
        self, path: str, request: AgentRequest, on_event: EventCallback
    ) -> None:
        """POST *request* to *path* and dispatch every streamed event.

        Raises
        ------
        AgentAPIError
            If the response status is not 2xx; the body is not streamed.
        """
        url = self.url(path)
        logger.debug("POST %s", url)

        async with self.client.stream(
            "POST", url, json=request.to_body(), headers=self._headers()
        ) as response:
            logger.debug("Response status: %s", response.status_code)
            if not response.is_success:
                error_text = (await response.aread()).decode(errors="replace")
                raise AgentAPIError(response.status_code, error_text)

            await stream_sse(response, on_event)

    # ------------------------------------------------------------------
    # Generation endpoints
    # ------------------------------------------------------------------

    async def generate_master_content(
        self, request: MasterContentRequest, on_event: EventCallback
    ) -> None:
        await self.post_stream(PATH_MASTER_CONTENT, request, on_event)

    async def generate_platform_variants(
        self,
        master_content_id: str,
        request: PlatformVariantsRequest,
        on_event: EventCallback,
    ) -> None:
        path = f"{PATH_PLATFORM_VARIANTS}/{quote(master_content_id, safe='')}"
        await self.post_stream(path, request, on_event)

    async def batch_generate_posts(
        self, request: BatchPostsRequest, on_event: EventCallback
    ) -> None:
        await self.post_stream(PATH_BATCH_POSTS, request, on_event)

    async def generate_worksheet(
        self, request: WorksheetRequest, on_event: EventCallback
    ) -> None:
        await self.post_stream(PATH_WORKSHEET, request, on_event)

    async def generate_brand_identity(
        self, request: BrandIdentityRequest, on_event: EventCallback
    ) -> None:
        await self.post_stream(PATH_BRAND_IDENTITY, request, on_event)

    async def generate_marketing_strategy(
        self, request: MarketingStrategyRequest, on_event: EventCallback
    ) -> None:
        await self.post_stream(PATH_MARKETING_STRATEGY, request, on_event)

    async def generate_content_briefs(
        self, request: ContentBriefsRequest, on_event: EventCallback
    ) -> None:
        await self.post_stream(PATH_CONTENT_BRIEFS, request, on_event)

    async def generate_customer_profile(
        self, request: CustomerProfileRequest, on_event: EventCallback
    ) -> None:
        await self.post_stream(PATH_CUSTOMER_PROFILE, request, on_event)

    async def send_message(self, request: ChatRequest, on_event: EventCallback) -> None:
        await self.post_stream(PATH_CHAT, request, on_event)

    # ------------------------------------------------------------------

    async def check_health(self) -> bool:
        """Return True if ``GET /health`` answers 2xx in time.  Never raises."""
        url = self.url(PATH_HEALTH)
        try:
            response = await self.client.get(
                url,
                headers=self._headers(json_body=False),
                timeout=self.config.health_timeout,
            )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.debug("Health check failed: %s", e)
            return False
        return response.is_success

    async def close(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()
