"""AI content generation: one client, one session, one in-flight run.

:class:`ContentGenerator` is what callers drive.  Each ``start_*`` method
tears down whatever run is in flight, resets the session, and schedules
the request on the running event loop.  It returns a
:class:`GenerationHandle` that can be awaited (returns once the run
settles) or cancelled.

Failures never escape a run; they end up in ``session.error`` (or as a
``warn`` event for a dropped connection).
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from marketing_hub.configs.system import AgentConfig
from marketing_hub.core.client import (
    AgentAPIError,
    AgentClient,
    EventCallback,
    is_interruption,
)
from marketing_hub.core.models import (
    BatchPostsRequest,
    BrandIdentityRequest,
    ChatRequest,
    ContentBriefsRequest,
    CustomerProfileRequest,
    MarketingStrategyRequest,
    MasterContentRequest,
    PlatformVariantsRequest,
    StreamEvent,
    WorksheetRequest,
)
from marketing_hub.core.session import GenerationSession

logger = logging.getLogger(__name__)

Operation = Callable[[EventCallback], Awaitable[None]]


class GenerationHandle:
    """Handle on a single in-flight generation run."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._cancelled = False
        self._task: asyncio.Task[None] | None = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def done(self) -> bool:
        return self._task is not None and self._task.done()

    def cancel(self) -> None:
        """Abort the request; no further events reach the session."""
        self._cancelled = True
        if self._task is not None and not self._task.done():
            self._task.cancel()

    async def wait(self) -> None:
        """Wait until the run has settled or finished being cancelled."""
        if self._task is None:
            return
        await asyncio.wait({self._task})

    def __await__(self):
        return self.wait().__await__()


class ContentGenerator:
    """Drives generation runs against the agent backend."""

    def __init__(
        self,
        config: AgentConfig,
        client: AgentClient | None = None,
        session: GenerationSession | None = None,
    ):
        self.config = config
        self.client = client if client is not None else AgentClient(config)
        self.session = session if session is not None else GenerationSession()
        self._handle: GenerationHandle | None = None

    async def __aenter__(self) -> "ContentGenerator":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    # ------------------------------------------------------------------
    # Session state
    # ------------------------------------------------------------------

    @property
    def events(self) -> list[StreamEvent]:
        return self.session.events

    @property
    def is_loading(self) -> bool:
        return self.session.is_loading

    @property
    def error(self) -> str | None:
        return self.session.error

    @property
    def generated_content(self) -> dict[str, Any] | None:
        return self.session.generated_content

    @property
    def current(self) -> GenerationHandle | None:
        return self._handle

    def reset(self) -> None:
        """Cancel any in-flight run and clear the session."""
        self._detach()
        self.session.reset()

    def _detach(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    # ------------------------------------------------------------------
    # Run lifecycle
    # ------------------------------------------------------------------

    def start(self, name: str, operation: Operation) -> GenerationHandle:
        """Begin a new run of *operation*; must be called inside a loop."""
        # Observers must see loading stop before the next run starts.
        self.reset()
        self.session.begin()

        handle = GenerationHandle(name)
        handle._task = asyncio.create_task(self._run(handle, operation), name=name)
        self._handle = handle
        return handle

    async def _run(self, handle: GenerationHandle, operation: Operation) -> None:
        def on_event(payload: dict[str, Any]) -> None:
            if handle.cancelled:
                return
            self.session.handle_event(payload)

        logger.debug("Starting generation: %s", handle.name)
        try:
            await operation(on_event)
        except asyncio.CancelledError:
            logger.debug("Generation cancelled: %s", handle.name)
            raise
        except AgentAPIError as e:
            if handle.cancelled:
                return
            logger.warning("Generation %s rejected: %s", handle.name, e)
            self.session.fail(str(e))
        except Exception as e:
            if handle.cancelled:
                return
            if is_interruption(e):
                logger.warning(
                    "Connection lost during %s; generation continues on server: %s",
                    handle.name,
                    e,
                )
                self.session.interrupt()
                return
            logger.exception("Unexpected error during %s", handle.name)
            self.session.fail(str(e) or type(e).__name__)
        else:
            if not handle.cancelled:
                self.session.finish()

    def _language(self, language: str | None) -> str:
        return language if language is not None else self.config.default_language

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def start_generating_master_content(
        self, campaign_id: str, workspace_id: str, language: str | None = None
    ) -> GenerationHandle:
        language = self._language(language)

        async def operation(on_event: EventCallback) -> None:
            request = MasterContentRequest(
                campaign_id=campaign_id,
                workspace_id=workspace_id,
                language_preference=language,
            )
            await self.client.generate_master_content(request, on_event)

        return self.start("master-content", operation)

    def start_generating_variants(
        self,
        master_content_id: str,
        platforms: list[str],
        workspace_id: str,
        language: str | None = None,
    ) -> GenerationHandle:
        language = self._language(language)

        async def operation(on_event: EventCallback) -> None:
            request = PlatformVariantsRequest(
                platforms=platforms,
                workspace_id=workspace_id,
                language_preference=language,
            )
            await self.client.generate_platform_variants(
                master_content_id, request, on_event
            )

        return self.start("platform-variants", operation)

    def start_batch_generating_posts(
        self,
        campaign_id: str,
        platforms: list[str],
        num_masters: int,
        workspace_id: str,
        language: str | None = None,
    ) -> GenerationHandle:
        language = self._language(language)

        async def operation(on_event: EventCallback) -> None:
            request = BatchPostsRequest(
                campaign_id=campaign_id,
                workspace_id=workspace_id,
                language=language,
                platforms=platforms,
                num_masters=num_masters,
            )
            await self.client.batch_generate_posts(request, on_event)

        return self.start("batch-posts", operation)

    def start_generating_worksheet(
        self,
        business_description: str,
        target_audience: str,
        pain_points: str,
        unique_selling_proposition: str,
        language: str | None = None,
    ) -> GenerationHandle:
        language = self._language(language)

        async def operation(on_event: EventCallback) -> None:
            request = WorksheetRequest(
                business_description=business_description,
                target_audience=target_audience,
                pain_points=pain_points,
                unique_selling_proposition=unique_selling_proposition,
                language=language,
            )
            await self.client.generate_worksheet(request, on_event)

        return self.start("worksheet", operation)

    def start_generating_brand_identity(
        self, worksheet_id: str, language: str | None = None
    ) -> GenerationHandle:
        language = self._language(language)

        async def operation(on_event: EventCallback) -> None:
            request = BrandIdentityRequest(worksheet_id=worksheet_id, language=language)
            await self.client.generate_brand_identity(request, on_event)

        return self.start("brand-identity", operation)

    def start_generating_marketing_strategy(
        self,
        worksheet_id: str,
        brand_identity_id: str,
        customer_profile_id: str,
        goal: str,
        language: str | None = None,
    ) -> GenerationHandle:
        language = self._language(language)

        async def operation(on_event: EventCallback) -> None:
            request = MarketingStrategyRequest(
                worksheet_id=worksheet_id,
                brand_identity_id=brand_identity_id,
                customer_profile_id=customer_profile_id,
                goal=goal,
                language=language,
            )
            await self.client.generate_marketing_strategy(request, on_event)

        return self.start("marketing-strategy", operation)

    def start_generating_content_briefs(
        self,
        campaign_id: str,
        workspace_id: str,
        angles_per_stage: int,
        language: str | None = None,
    ) -> GenerationHandle:
        language = self._language(language)

        async def operation(on_event: EventCallback) -> None:
            request = ContentBriefsRequest(
                campaign_id=campaign_id,
                workspace_id=workspace_id,
                language=language,
                angles_per_stage=angles_per_stage,
            )
            await self.client.generate_content_briefs(request, on_event)

        return self.start("content-briefs", operation)

    def start_generating_customer_profile(
        self, brand_identity_id: str, language: str | None = None
    ) -> GenerationHandle:
        language = self._language(language)

        async def operation(on_event: EventCallback) -> None:
            request = CustomerProfileRequest(
                brand_identity_id=brand_identity_id, language=language
            )
            await self.client.generate_customer_profile(request, on_event)

        return self.start("customer-profile", operation)

    def start_chat(self, message: str, thread_id: str) -> GenerationHandle:
        async def operation(on_event: EventCallback) -> None:
            request = ChatRequest(message=message, thread_id=thread_id)
            await self.client.send_message(request, on_event)

        return self.start("chat", operation)

    # ------------------------------------------------------------------

    async def check_health(self) -> bool:
        return await self.client.check_health()

    async def aclose(self) -> None:
        """Abort any in-flight run and release the connection pool."""
        handle = self._handle
        self._detach()
        if handle is not None:
            await handle.wait()
        await self.client.close()
