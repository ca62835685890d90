"""
One-shot cancellation signals.

A CancelSignal is triggered at most once. Callbacks registered on it run
when it fires; callbacks registered after it fired run immediately. The
request engine links a deadline timer and the caller's signal to one
per-attempt controller, so either source aborts the in-flight call.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, TypeVar

T = TypeVar("T")

CancelCallback = Callable[[str], None]

ABORTED = "aborted"
TIMEOUT = "timeout"


class CancelSignal:
    """Cooperative, one-shot cancellation token.

    Example:
        signal = CancelSignal()
        task = asyncio.create_task(consume(client.stream("/chat", body, signal)))
        ...
        signal.cancel()
    """

    def __init__(self) -> None:
        self._reason: str | None = None
        self._callbacks: list[CancelCallback] = []

    @property
    def cancelled(self) -> bool:
        return self._reason is not None

    @property
    def reason(self) -> str | None:
        return self._reason

    def cancel(self, reason: str = ABORTED) -> None:
        """Trigger the signal. Later calls are no-ops."""
        if self._reason is not None:
            return
        self._reason = reason
        callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            callback(reason)

    def add_callback(self, callback: CancelCallback) -> None:
        if self._reason is not None:
            callback(self._reason)
            return
        self._callbacks.append(callback)

    def remove_callback(self, callback: CancelCallback) -> None:
        try:
            self._callbacks.remove(callback)
        except ValueError:
            pass


async def run_cancellable(awaitable: Awaitable[T], controller: CancelSignal) -> T:
    """Await an operation that the controller can abort.

    The operation runs as its own task; when the controller fires the task
    is cancelled and ``asyncio.CancelledError`` is raised to the caller.
    Check ``controller.cancelled`` to tell an abort apart from cancellation
    of the calling task.

    Args:
        awaitable: The network sub-operation.
        controller: Per-attempt cancellation controller.

    Returns:
        The operation's result.
    """
    task = asyncio.ensure_future(awaitable)

    def _abort(_reason: str) -> None:
        task.cancel()

    controller.add_callback(_abort)
    try:
        return await task
    finally:
        controller.remove_callback(_abort)
