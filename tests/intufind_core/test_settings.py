"""Unit tests for environment settings."""

from intufind_core.config import Settings
from intufind_core.runtime.context import ClientConfig


class TestSettings:
    """Tests for Settings defaults and overrides."""

    def test_defaults(self, monkeypatch):
        for name in ["INTUFIND_API_ENDPOINT", "INTUFIND_TIMEOUT", "INTUFIND_MAX_RETRIES", "INTUFIND_DEBUG"]:
            monkeypatch.delenv(name, raising=False)

        settings = Settings(_env_file=None)

        assert settings.INTUFIND_API_ENDPOINT == "https://api.intufind.com"
        assert settings.INTUFIND_STREAMING_ENDPOINT == "https://streaming.intufind.com"
        assert settings.INTUFIND_TIMEOUT == 30.0
        assert settings.INTUFIND_MAX_RETRIES == 3
        assert settings.INTUFIND_DEBUG is False

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("INTUFIND_API_KEY", "env-key")
        monkeypatch.setenv("INTUFIND_WORKSPACE_ID", "shop-com")
        monkeypatch.setenv("INTUFIND_TIMEOUT", "5")
        monkeypatch.setenv("INTUFIND_MAX_RETRIES", "0")
        monkeypatch.setenv("INTUFIND_DEBUG", "true")

        settings = Settings(_env_file=None)

        assert settings.INTUFIND_API_KEY == "env-key"
        assert settings.INTUFIND_TIMEOUT == 5.0
        assert settings.INTUFIND_MAX_RETRIES == 0
        assert settings.INTUFIND_DEBUG is True

    def test_to_client_config(self, monkeypatch):
        monkeypatch.setenv("INTUFIND_API_KEY", "env-key")
        monkeypatch.setenv("INTUFIND_API_ENDPOINT", "http://localhost:8080/")
        monkeypatch.delenv("INTUFIND_WORKSPACE_ID", raising=False)

        config = ClientConfig.from_settings(Settings(_env_file=None))

        assert config.api_key == "env-key"
        assert config.api_endpoint == "http://localhost:8080"
        assert config.workspace_id is None
