"""Request bodies for the agent backend's generation endpoints.

Field names are snake_case in Python and camelCase on the wire; dump
with :meth:`AgentRequest.to_body`.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .constants import DEFAULT_LANGUAGE


class AgentRequest(BaseModel):
    """Base for every generation request body."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_body(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class MasterContentRequest(AgentRequest):
    """Generate master content for a campaign."""

    campaign_id: str
    workspace_id: str
    language_preference: str = DEFAULT_LANGUAGE


class PlatformVariantsRequest(AgentRequest):
    """Generate platform variants of existing master content.

    The master content id travels in the URL path, not the body.
    """

    platforms: list[str]
    workspace_id: str
    language_preference: str = DEFAULT_LANGUAGE


class BatchPostsRequest(AgentRequest):
    """Batch-generate several master posts, each with variants."""

    campaign_id: str
    workspace_id: str
    language: str = DEFAULT_LANGUAGE
    platforms: list[str]
    num_masters: int = Field(ge=1)


class WorksheetRequest(AgentRequest):
    """Generate a business definition worksheet from free text."""

    business_description: str
    target_audience: str
    pain_points: str
    unique_selling_proposition: str
    language: str = DEFAULT_LANGUAGE


class BrandIdentityRequest(AgentRequest):
    worksheet_id: str
    language: str = DEFAULT_LANGUAGE


class MarketingStrategyRequest(AgentRequest):
    """Generate a marketing strategy from worksheet, brand and persona."""

    worksheet_id: str
    brand_identity_id: str
    customer_profile_id: str
    goal: str
    language: str = DEFAULT_LANGUAGE


class ContentBriefsRequest(AgentRequest):
    """Generate content briefs across funnel stages."""

    campaign_id: str
    workspace_id: str
    language: str = DEFAULT_LANGUAGE
    angles_per_stage: int = Field(ge=1)


class CustomerProfileRequest(AgentRequest):
    brand_identity_id: str
    language: str = DEFAULT_LANGUAGE


class ChatRequest(AgentRequest):
    """Free-form message to the marketing agents.

    The chat endpoint expects ``thread_id`` in snake_case.
    """

    message: str
    thread_id: str = Field(alias="thread_id")
