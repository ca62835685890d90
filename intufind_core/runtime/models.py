"""
Wire-level models shared by the request engine and the stream decoder.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ApiResponse(BaseModel):
    """Unwrapped success envelope ``{data, tierLimits?, usage?}``.

    Attributes:
        data: The primary result returned to the caller.
        tier_limits: Plan limits reported by the service, passed through.
        usage: Usage/quota information, passed through.
    """

    data: Any = None
    tier_limits: Any = Field(default=None, alias="tierLimits")
    usage: Any = None

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @classmethod
    def from_body(cls, body: Any) -> "ApiResponse":
        """Unwrap a parsed success body.

        Args:
            body: Parsed JSON body of a 2xx response.

        Returns:
            ApiResponse with only the envelope fields kept.
        """
        if not isinstance(body, dict):
            return cls()
        return cls(
            data=body.get("data"),
            tier_limits=body.get("tierLimits"),
            usage=body.get("usage"),
        )


class ApiErrorInfo(BaseModel):
    """Normalized error payload extracted from a non-success body."""

    message: str
    code: str | None = None
    details: Any = None
    request_id: str | None = None

    model_config = ConfigDict(frozen=True)


class RequestSpec(BaseModel):
    """One logical request, built per call and discarded afterwards."""

    method: str
    url: str
    body: Any = None
    headers: dict[str, str] = Field(default_factory=dict)
    signal: Any = None
    timeout: float | None = None

    model_config = ConfigDict(frozen=True)


class StreamChunkType(str, Enum):
    """Chunk types emitted by the streaming endpoint."""

    TEXT_DELTA = "text_delta"
    PRODUCT = "product"
    POST = "post"
    POST_DELTA = "post_delta"
    PROMPTS = "prompts"
    PROGRESS = "progress"
    ERROR = "error"
    ANALYTICS = "analytics"
    USAGE = "usage"
    METADATA = "metadata"
    COMPLETE = "complete"
    BUBBLE_TERMINATION = "bubble_termination"
    ORCHESTRATION_INTERRUPTED = "orchestration_interrupted"
    DOMAIN_OFFER = "domain_offer"
    DOMAIN_OFFER_SUCCESS = "domain_offer_success"


class StreamChunk(BaseModel):
    """One decoded record of a chunk stream.

    ``type`` is kept as a plain string so that chunk types added by the
    service later still decode; compare it against StreamChunkType.
    """

    type: str
    data: Any = None
    metadata: Any = None

    model_config = ConfigDict(frozen=True)

    def is_type(self, chunk_type: StreamChunkType | str) -> bool:
        return self.type == chunk_type

    def is_text_delta(self) -> bool:
        return self.is_type(StreamChunkType.TEXT_DELTA)

    def is_product(self) -> bool:
        return self.is_type(StreamChunkType.PRODUCT)

    def is_post(self) -> bool:
        return self.is_type(StreamChunkType.POST)

    def is_post_delta(self) -> bool:
        return self.is_type(StreamChunkType.POST_DELTA)

    def is_prompts(self) -> bool:
        return self.is_type(StreamChunkType.PROMPTS)

    def is_domain_offer(self) -> bool:
        return self.is_type(StreamChunkType.DOMAIN_OFFER)

    def is_domain_offer_success(self) -> bool:
        return self.is_type(StreamChunkType.DOMAIN_OFFER_SUCCESS)

    def is_complete(self) -> bool:
        return self.is_type(StreamChunkType.COMPLETE)

    def is_error(self) -> bool:
        return self.is_type(StreamChunkType.ERROR)
