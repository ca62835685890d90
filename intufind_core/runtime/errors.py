"""
Error taxonomy for API requests.

Every failure surfaced by the client is an ApiError carrying the same
payload (message, status, code, details, request_id). The kind of error
decides whether the request engine may retry it.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from .models import ApiErrorInfo


class ErrorKind(str, Enum):
    """Classification of a failed request."""

    VALIDATION = "validation"
    AUTHENTICATION = "authentication"
    PLAN_EXPIRED = "plan_expired"
    NOT_FOUND = "not_found"
    RATE_LIMIT = "rate_limit"
    API = "api"
    NETWORK = "network"


# Kinds that surface to the caller on first occurrence.
NON_RETRYABLE_KINDS = frozenset(
    {
        ErrorKind.VALIDATION,
        ErrorKind.AUTHENTICATION,
        ErrorKind.PLAN_EXPIRED,
        ErrorKind.NOT_FOUND,
    }
)


class ErrorCode:
    """Codes assigned by the client when the server did not send one."""

    TIMEOUT = "TIMEOUT"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    ABORTED = "ABORTED"
    RETRIES_EXHAUSTED = "RETRIES_EXHAUSTED"


class ApiError(Exception):
    """Base error for all API failures.

    Used directly for statuses without a dedicated class (other 4xx and
    5xx). Client errors (4xx) are terminal, everything else is retryable.

    Attributes:
        kind: ErrorKind of this error.
        message: Human-readable message extracted from the response.
        status: HTTP status code (0 for transport failures).
        code: Optional machine-readable error code.
        details: Optional structured details from the response body.
        request_id: Optional request id from the x-request-id header.
    """

    kind: ErrorKind = ErrorKind.API
    default_message: str = "Unknown error"
    default_status: int = 500

    def __init__(
        self,
        message: str | None = None,
        status: int | None = None,
        code: str | None = None,
        details: Any = None,
        request_id: str | None = None,
    ):
        self.message = message or self.default_message
        super().__init__(self.message)
        self.status = self.default_status if status is None else status
        self.code = code
        self.details = details
        self.request_id = request_id

    @property
    def retryable(self) -> bool:
        """Whether the request engine may attempt the request again."""
        if self.kind in NON_RETRYABLE_KINDS:
            return False
        if self.kind is ErrorKind.API:
            return not 400 <= self.status < 500
        return True

    def __str__(self) -> str:
        if self.code:
            return f"[{self.code}] {self.message}"
        return self.message

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(message={self.message!r}, "
            f"status={self.status}, code={self.code!r}, "
            f"request_id={self.request_id!r})"
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain dictionary, e.g. for structured logs."""
        return {
            "kind": self.kind.value,
            "message": self.message,
            "status": self.status,
            "code": self.code,
            "details": self.details,
            "request_id": self.request_id,
        }


class ValidationError(ApiError):
    """The request was malformed (400)."""

    kind = ErrorKind.VALIDATION
    default_message = "Validation failed"
    default_status = 400


class AuthenticationError(ApiError):
    """The credential was missing or rejected (401)."""

    kind = ErrorKind.AUTHENTICATION
    default_message = "Authentication failed"
    default_status = 401


class PlanExpiredError(ApiError):
    """The account's trial or plan has ended (402)."""

    kind = ErrorKind.PLAN_EXPIRED
    default_message = "Your free trial has ended"
    default_status = 402

    def __init__(
        self,
        message: str | None = None,
        status: int | None = None,
        code: str | None = None,
        details: Any = None,
        request_id: str | None = None,
        trial_ended_at: str | None = None,
        upgrade_url: str | None = None,
    ):
        super().__init__(message, status, code, details, request_id)
        self.trial_ended_at = trial_ended_at
        self.upgrade_url = upgrade_url

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["trial_ended_at"] = self.trial_ended_at
        result["upgrade_url"] = self.upgrade_url
        return result


class NotFoundError(ApiError):
    """The requested resource does not exist (404)."""

    kind = ErrorKind.NOT_FOUND
    default_message = "Resource not found"
    default_status = 404


class RateLimitError(ApiError):
    """Too many requests (429)."""

    kind = ErrorKind.RATE_LIMIT
    default_message = "Rate limit exceeded"
    default_status = 429


class NetworkError(ApiError):
    """Transport failure, timeout, or retries exhausted without a response."""

    kind = ErrorKind.NETWORK
    default_message = "Network error"
    default_status = 0


class RequestAbortedError(NetworkError):
    """The caller's cancellation signal aborted the request."""

    default_message = "Request aborted"

    @property
    def retryable(self) -> bool:
        return False


def extract_error_info(body: Any, request_id: str | None = None) -> ApiErrorInfo:
    """Normalize an error response body.

    The message is looked up as nested ``error.message``, then a string
    ``error``, then top-level ``message``, falling back to "Unknown error".

    Args:
        body: Parsed response body (any JSON value).
        request_id: Request id taken from the response headers.

    Returns:
        The normalized ApiErrorInfo.
    """
    data = body if isinstance(body, dict) else {}
    error = data.get("error")
    error_obj = error if isinstance(error, dict) else {}

    message = error_obj.get("message")
    if message is None and isinstance(error, str):
        message = error
    if message is None:
        message = data.get("message")
    if message is None:
        message = "Unknown error"

    code = error_obj.get("code")
    if code is None:
        code = data.get("code")
    details = error_obj.get("details")
    if details is None:
        details = data.get("details")

    return ApiErrorInfo(
        message=str(message),
        code=None if code is None else str(code),
        details=details,
        request_id=request_id,
    )


_STATUS_ERRORS: dict[int, type[ApiError]] = {
    400: ValidationError,
    401: AuthenticationError,
    404: NotFoundError,
    429: RateLimitError,
}


def error_from_response(status: int, body: Any, request_id: str | None = None) -> ApiError:
    """Build the typed error for a non-success response.

    Args:
        status: HTTP status code.
        body: Parsed response body.
        request_id: Request id from the x-request-id header, if any.

    Returns:
        The ApiError subclass matching the status code.
    """
    info = extract_error_info(body, request_id)
    fields = {
        "message": info.message,
        "status": status,
        "code": info.code,
        "details": info.details,
        "request_id": info.request_id,
    }

    if status == 402:
        data = body if isinstance(body, dict) else {}
        return PlanExpiredError(
            **fields,
            trial_ended_at=data.get("trial_ended_at"),
            upgrade_url=data.get("upgrade_url"),
        )

    error_cls = _STATUS_ERRORS.get(status, ApiError)
    return error_cls(**fields)
