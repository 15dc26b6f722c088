"""Configuration management using pydantic-settings.

**Not a singleton**: each call to ``get_app_config()`` re-reads config
from disk and the environment.

Priority order (highest first):

0. Init arguments
1. Override YAML (path from ``MARKETING_HUB_CONFIG_FILE`` env var)
2. Environment variables (``MARKETING_HUB_`` prefix)
3. ``.env`` dotenv file
4. Static YAML (``configs/config.yaml``)
5. File secrets
6. Field defaults

The resulting object is handed explicitly to the agent client; nothing
reads it through module globals.
"""

import os
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

from .system import ActivityConfig, AgentConfig, LoggingConfig

# ---------------------------------------------------------------------------
# Path constants
# ---------------------------------------------------------------------------

CONFIG_PY_PATH = Path(__file__).resolve()
PROJECT_ROOT = CONFIG_PY_PATH.parent.parent.parent.parent
CONFIG_DIR = PROJECT_ROOT / "configs"

STATIC_CONFIG_FILE = CONFIG_DIR / "config.yaml"

DOTENV_FILE_PATH = PROJECT_ROOT / ".env"
ENV_DELIMITER = "__"  # Nested environment variable delimiter
ENV_PREFIX = "MARKETING_HUB_"
OVERRIDE_FILE_ENV = "MARKETING_HUB_CONFIG_FILE"

DEFAULT_ENCODING = "utf-8"


def _override_config_file() -> Optional[Path]:
    value = os.environ.get(OVERRIDE_FILE_ENV)
    return Path(value) if value else None


class AppConfig(BaseSettings):
    """Application configuration."""

    model_config = SettingsConfigDict(
        env_file=DOTENV_FILE_PATH,
        env_file_encoding=DEFAULT_ENCODING,
        env_nested_delimiter=ENV_DELIMITER,
        env_prefix=ENV_PREFIX,
        case_sensitive=False,
        extra="ignore",
        yaml_file=STATIC_CONFIG_FILE,
        yaml_file_encoding=DEFAULT_ENCODING,
    )

    agent: AgentConfig = Field(
        default_factory=AgentConfig,
        description="Agent backend connection settings",
    )

    activity: ActivityConfig = Field(
        default_factory=ActivityConfig,
        description="Activity log presentation settings",
    )

    logging: LoggingConfig = Field(
        default_factory=LoggingConfig,
        description="Logging output settings",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        sources: list[PydanticBaseSettingsSource] = [init_settings]

        # 1. Override YAML, highest file-based priority
        override = _override_config_file()
        if override is not None and override.is_file():
            sources.append(YamlConfigSettingsSource(settings_cls, yaml_file=override))

        # 2-3. Env vars and dotenv
        sources.append(env_settings)
        sources.append(dotenv_settings)

        # 4. Static YAML
        sources.append(YamlConfigSettingsSource(settings_cls))

        # 5. File secrets
        sources.append(file_secret_settings)

        return tuple(sources)


def get_app_config() -> AppConfig:
    """Get the application configuration.

    Re-reads ``configs/config.yaml`` (and the override file when present)
    on every call.
    """
    return AppConfig()
