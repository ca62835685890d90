"""
Environment configuration for the Intufind client.

Settings are loaded from a .env file and can be overridden by actual
environment variables. Use ClientConfig.from_settings() to turn them into
a validated client configuration.
"""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

# Project root for .env file loading (allows running from any CWD)
PROJECT_ROOT = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    """
    Client settings read from INTUFIND_* environment variables.

    Timeouts and delays are in seconds.
    """

    # Credentials
    INTUFIND_API_KEY: str = ""
    INTUFIND_WORKSPACE_ID: str = ""

    # Endpoints
    INTUFIND_API_ENDPOINT: str = "https://api.intufind.com"
    INTUFIND_STREAMING_ENDPOINT: str = "https://streaming.intufind.com"

    # Request behavior
    INTUFIND_TIMEOUT: float = 30.0
    INTUFIND_MAX_RETRIES: int = 3
    INTUFIND_RETRY_DELAY: float = 1.0

    # Diagnostics
    INTUFIND_DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=PROJECT_ROOT / ".env",
        extra="ignore"
    )


# Global settings instance
settings = Settings()  # type: ignore
