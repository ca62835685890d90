"""
Immutable client configuration.

ClientConfig is created once per client and shared read-only by every
request the client issues. Scoped variants (another workspace, another
key) are derived copies; the original is never modified.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING
from urllib.parse import urlsplit

from pydantic import BaseModel, Field, field_validator

from .retry import RetryPolicy

if TYPE_CHECKING:
    from intufind_core.config import Settings

DEFAULT_API_ENDPOINT = "https://api.intufind.com"
DEFAULT_STREAMING_ENDPOINT = "https://streaming.intufind.com"
DEFAULT_TIMEOUT = 30.0
DEFAULT_MAX_RETRIES = 3
DEFAULT_RETRY_DELAY = 1.0

WORKSPACE_HEADER = "X-Workspace-ID"


class ClientConfig(BaseModel):
    """Configuration for an ApiHttpClient.

    Attributes:
        api_key: Credential sent as a Bearer token. Must be non-empty.
        api_endpoint: Base URL for regular API requests.
        streaming_endpoint: Base URL for streaming requests.
        workspace_id: Optional workspace (tenant) scoping header value.
        timeout: Default per-attempt timeout in seconds.
        max_retries: Retries after the first attempt.
        retry_delay: Base backoff delay in seconds.
        debug: Emit per-attempt debug log lines.
        headers: Custom headers added to every request.
    """

    api_key: str
    api_endpoint: str = DEFAULT_API_ENDPOINT
    streaming_endpoint: str = DEFAULT_STREAMING_ENDPOINT
    workspace_id: str | None = None
    timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0)
    max_retries: int = Field(default=DEFAULT_MAX_RETRIES, ge=0)
    retry_delay: float = Field(default=DEFAULT_RETRY_DELAY, ge=0)
    debug: bool = False
    headers: dict[str, str] = Field(default_factory=dict)

    model_config = {"frozen": True}

    @field_validator("api_key")
    @classmethod
    def _require_api_key(cls, value: str) -> str:
        if not value:
            raise ValueError("api_key is required")
        return value

    @field_validator("api_endpoint", "streaming_endpoint")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @classmethod
    def from_settings(cls, settings: "Settings") -> "ClientConfig":
        """Create a configuration from environment settings.

        Args:
            settings: Loaded Settings instance.

        Returns:
            A validated ClientConfig.
        """
        return cls(
            api_key=settings.INTUFIND_API_KEY,
            api_endpoint=settings.INTUFIND_API_ENDPOINT,
            streaming_endpoint=settings.INTUFIND_STREAMING_ENDPOINT,
            workspace_id=settings.INTUFIND_WORKSPACE_ID or None,
            timeout=settings.INTUFIND_TIMEOUT,
            max_retries=settings.INTUFIND_MAX_RETRIES,
            retry_delay=settings.INTUFIND_RETRY_DELAY,
            debug=settings.INTUFIND_DEBUG,
        )

    @property
    def retry_policy(self) -> RetryPolicy:
        """Retry policy implied by max_retries and retry_delay."""
        return RetryPolicy(
            max_attempts=self.max_retries + 1,
            base_delay=self.retry_delay,
        )

    def with_workspace_id(self, workspace_id: str) -> "ClientConfig":
        """Return a copy scoped to another workspace."""
        return self.model_copy(update={"workspace_id": workspace_id})

    def with_api_key(self, api_key: str) -> "ClientConfig":
        """Return a copy using another credential."""
        return self.model_validate({**self.model_dump(), "api_key": api_key})

    def with_debug(self, debug: bool = True) -> "ClientConfig":
        """Return a copy with debug logging toggled."""
        return self.model_copy(update={"debug": debug})

    def get_headers(self, extra: dict[str, str] | None = None) -> dict[str, str]:
        """Build the headers for an outbound request.

        Custom headers override the defaults, per-request headers override
        custom headers, and the workspace header is applied last.

        Args:
            extra: Per-request headers.

        Returns:
            Dictionary of headers to send.
        """
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
            **self.headers,
            **(extra or {}),
        }
        if self.workspace_id:
            headers[WORKSPACE_HEADER] = self.workspace_id
        return headers


def workspace_id_from_url(url: str) -> str:
    """Convert a site URL or domain to a normalized workspace id.

    Example:
        workspace_id_from_url("https://mystore.com")    # "mystore-com"
        workspace_id_from_url("example.com/path")       # "example-com"
    """
    if not url:
        return ""

    candidate = url if url.lower().startswith("http") else f"https://{url}"
    try:
        hostname = urlsplit(candidate).hostname
    except ValueError:
        hostname = None

    if hostname:
        return hostname.replace(".", "-").lower()

    slug = re.sub(r"^https?://", "", url)
    slug = re.sub(r"/.*$", "", slug)
    slug = re.sub(r"[^a-zA-Z0-9-]", "-", slug)
    slug = re.sub(r"-+", "-", slug)
    return slug.strip("-").lower()
