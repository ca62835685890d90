"""
Retry policy and attempt loop.

The delay before retry N (0-indexed) is base_delay * exponential_base ** N,
capped at max_delay, with optional jitter.
"""

from __future__ import annotations

import asyncio
import random
from typing import Awaitable, Callable, TypeVar

from loguru import logger
from pydantic import BaseModel

from .errors import ApiError, ErrorCode, NetworkError

T = TypeVar("T")


class RetryPolicy(BaseModel):
    """Configuration for retry behavior.

    Attributes:
        max_attempts: Maximum number of attempts (including initial).
        base_delay: Initial delay in seconds between retries.
        max_delay: Maximum delay in seconds (caps backoff).
        exponential_base: Base for exponential backoff calculation.
        jitter: Whether to add random jitter to delays.
    """

    max_attempts: int = 4
    base_delay: float = 1.0
    max_delay: float = 60.0
    exponential_base: float = 2.0
    jitter: bool = False

    model_config = {"frozen": True}

    def calculate_delay(self, attempt: int) -> float:
        """Calculate delay for a given attempt number.

        Args:
            attempt: The attempt number (0-indexed).

        Returns:
            Delay in seconds before the next retry.
        """
        delay = self.base_delay * (self.exponential_base**attempt)
        delay = min(delay, self.max_delay)

        if self.jitter:
            # Add up to 25% jitter
            jitter_amount = delay * 0.25 * random.random()
            delay += jitter_amount

        return delay

    def should_retry(self, error: BaseException) -> bool:
        """Check whether an error allows another attempt.

        Args:
            error: The error raised by the failed attempt.

        Returns:
            True for retryable ApiErrors.
        """
        return isinstance(error, ApiError) and error.retryable


async def retry_async(
    operation: Callable[[int], Awaitable[T]],
    policy: RetryPolicy,
    on_retry: Callable[[int, ApiError, float], None] | None = None,
    label: str = "request",
) -> T:
    """Run an operation until it succeeds or the policy gives up.

    Attempts are strictly sequential. Non-retryable errors and the error
    of the last allowed attempt are re-raised untouched. Exceptions that
    are not ApiErrors propagate immediately.

    Args:
        operation: Coroutine function called with the 0-indexed attempt.
        policy: Retry policy to apply.
        on_retry: Optional callback called before each backoff sleep with
                  (attempt, error, delay).
        label: Name used in log lines.

    Returns:
        The operation's result.
    """
    for attempt in range(policy.max_attempts):
        try:
            return await operation(attempt)
        except ApiError as e:
            if not policy.should_retry(e):
                raise
            if attempt + 1 >= policy.max_attempts:
                logger.warning(
                    f"Max attempts ({policy.max_attempts}) exceeded for {label}: {e}"
                )
                raise

            delay = policy.calculate_delay(attempt)
            logger.info(
                f"Retry {attempt + 1}/{policy.max_attempts - 1} for {label} "
                f"in {delay:.2f}s: {e}"
            )

            if on_retry:
                on_retry(attempt, e, delay)

            await asyncio.sleep(delay)

    # Only reachable with max_attempts < 1
    raise NetworkError(
        "Request failed after all retry attempts",
        code=ErrorCode.RETRIES_EXHAUSTED,
    )
