"""
Request runtime for the Intufind client.

This package provides the core used by every API resource:
- ClientConfig: Immutable endpoint/credential/retry configuration
- ApiHttpClient: Request engine with timeout, retry and envelope unwrapping
- StreamDecoder: Incremental decoder for newline-delimited chunk streams
- ApiError: Error taxonomy with retry semantics
- CancelSignal: One-shot cancellation token for requests and streams
"""

from .cancellation import CancelSignal
from .context import ClientConfig, workspace_id_from_url
from .errors import (
    ApiError,
    AuthenticationError,
    ErrorCode,
    ErrorKind,
    NetworkError,
    NotFoundError,
    PlanExpiredError,
    RateLimitError,
    RequestAbortedError,
    ValidationError,
)
from .http_client import ApiHttpClient
from .models import ApiErrorInfo, ApiResponse, StreamChunk, StreamChunkType
from .retry import RetryPolicy, retry_async
from .streaming import StreamDecoder, parse_stream

__all__ = [
    "ApiError",
    "ApiErrorInfo",
    "ApiHttpClient",
    "ApiResponse",
    "AuthenticationError",
    "CancelSignal",
    "ClientConfig",
    "ErrorCode",
    "ErrorKind",
    "NetworkError",
    "NotFoundError",
    "PlanExpiredError",
    "RateLimitError",
    "RequestAbortedError",
    "RetryPolicy",
    "StreamChunk",
    "StreamChunkType",
    "StreamDecoder",
    "ValidationError",
    "parse_stream",
    "retry_async",
    "workspace_id_from_url",
]
