"""Test configuration reading from multiple sources."""

import os
from pathlib import Path
from unittest.mock import patch

from marketing_hub.configs.config import AppConfig, get_app_config
from marketing_hub.configs.system import AgentConfig


class TestConfigDefaults:
    """Defaults apply when nothing else is configured."""

    def test_agent_defaults(self):
        config = AgentConfig()
        assert config.base_url == "http://localhost:8000"
        assert config.health_timeout == 3.0
        assert config.auth_token is None
        assert config.default_language == "Vietnamese"

    def test_get_app_config_returns_fresh_instances(self):
        config1 = get_app_config()
        config2 = get_app_config()
        assert config1 is not config2
        assert isinstance(config1, AppConfig)
        assert config1.activity.long_running_after == 30.0


class TestConfigSources:
    """Test configuration loading from multiple sources."""

    def test_config_env_vars_work(self):
        env_vars = {
            "MARKETING_HUB_AGENT__BASE_URL": "http://agents.internal:9000",
            "MARKETING_HUB_AGENT__AUTH_TOKEN": "secret-token",
            "MARKETING_HUB_ACTIVITY__LONG_RUNNING_AFTER": "12.5",
        }

        with patch.dict(os.environ, env_vars, clear=False):
            config = AppConfig()

            assert config.agent.base_url == "http://agents.internal:9000"
            assert config.agent.auth_token.get_secret_value() == "secret-token"
            assert config.activity.long_running_after == 12.5
            # Untouched fields keep their defaults.
            assert config.agent.health_timeout == 3.0

    def test_override_file_wins_over_env(self, tmp_path: Path):
        override = tmp_path / "override.yaml"
        override.write_text(
            "agent:\n  base_url: http://from-file:8000\nlogging:\n  json_output: true\n",
            encoding="utf-8",
        )
        env_vars = {
            "MARKETING_HUB_CONFIG_FILE": str(override),
            "MARKETING_HUB_AGENT__BASE_URL": "http://from-env:8000",
        }

        with patch.dict(os.environ, env_vars, clear=False):
            config = AppConfig()

            assert config.agent.base_url == "http://from-file:8000"
            assert config.logging.json_output is True

    def test_missing_override_file_is_ignored(self, tmp_path: Path):
        env_vars = {"MARKETING_HUB_CONFIG_FILE": str(tmp_path / "missing.yaml")}

        with patch.dict(os.environ, env_vars, clear=False):
            config = AppConfig()

            assert config.agent.base_url == "http://localhost:8000"
