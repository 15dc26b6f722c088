from pydantic import BaseModel, Field, SecretStr

from marketing_hub.core.models.constants import DEFAULT_LANGUAGE


class AgentConfig(BaseModel):
    """Connection settings for the AI-agent backend."""

    base_url: str = Field(
        default="http://localhost:8000",
        description="Base URL of the agent backend",
    )
    health_timeout: float = Field(
        default=3.0, gt=0, description="Timeout in seconds for GET /health"
    )
    # Generation jobs may legitimately run long, so only connecting is bounded.
    connect_timeout: float = Field(
        default=10.0, gt=0, description="Connect timeout in seconds"
    )
    auth_token: SecretStr | None = Field(
        default=None,
        description="Bearer token forwarded on every request when set",
    )
    default_language: str = Field(
        default=DEFAULT_LANGUAGE,
        description="Language used when a caller does not pass one",
    )


class ActivityConfig(BaseModel):
    """Activity log presentation settings."""

    long_running_after: float = Field(
        default=30.0,
        gt=0,
        description="Seconds of continuous loading before the server-side notice",
    )
    chunk_preview_length: int = Field(
        default=50, ge=1, description="Characters of a chunk shown in the log"
    )


class LoggingConfig(BaseModel):
    """Logging output settings."""

    level: str = Field(default="INFO", description="Root log level")
    json_output: bool = Field(
        default=False, description="Emit JSON lines instead of plain text"
    )
