"""Unit tests for CancelSignal and run_cancellable."""

import asyncio

import pytest

from intufind_core.runtime.cancellation import (
    ABORTED,
    TIMEOUT,
    CancelSignal,
    run_cancellable,
)


class TestCancelSignal:
    """Tests for the one-shot token."""

    def test_initial_state(self):
        signal = CancelSignal()

        assert signal.cancelled is False
        assert signal.reason is None

    def test_cancel_runs_callbacks_once(self):
        signal = CancelSignal()
        calls = []
        signal.add_callback(calls.append)

        signal.cancel(TIMEOUT)
        signal.cancel(ABORTED)

        assert calls == [TIMEOUT]
        assert signal.reason == TIMEOUT

    def test_callback_after_cancel_runs_immediately(self):
        signal = CancelSignal()
        signal.cancel()
        calls = []

        signal.add_callback(calls.append)

        assert calls == [ABORTED]

    def test_remove_callback(self):
        signal = CancelSignal()
        calls = []
        signal.add_callback(calls.append)

        signal.remove_callback(calls.append)
        signal.remove_callback(calls.append)  # unknown callbacks are ignored
        signal.cancel()

        assert calls == []

    def test_fan_in(self):
        """Either of two sources should trigger one controller."""
        deadline = CancelSignal()
        external = CancelSignal()
        controller = CancelSignal()
        deadline.add_callback(controller.cancel)
        external.add_callback(controller.cancel)

        external.cancel(ABORTED)
        deadline.cancel(TIMEOUT)

        assert controller.cancelled is True
        assert controller.reason == ABORTED


class TestRunCancellable:
    """Tests for aborting an awaitable through a controller."""

    @pytest.mark.asyncio
    async def test_returns_result(self):
        async def work():
            return 42

        assert await run_cancellable(work(), CancelSignal()) == 42

    @pytest.mark.asyncio
    async def test_controller_aborts_operation(self):
        controller = CancelSignal()
        finished = False

        async def slow():
            nonlocal finished
            await asyncio.sleep(10)
            finished = True

        asyncio.get_running_loop().call_later(0.01, controller.cancel, TIMEOUT)

        with pytest.raises(asyncio.CancelledError):
            await run_cancellable(slow(), controller)

        assert controller.reason == TIMEOUT
        assert finished is False

    @pytest.mark.asyncio
    async def test_already_cancelled_controller(self):
        controller = CancelSignal()
        controller.cancel()

        async def work():
            return "never"

        with pytest.raises(asyncio.CancelledError):
            await run_cancellable(work(), controller)

    @pytest.mark.asyncio
    async def test_cancel_after_completion_is_noop(self):
        controller = CancelSignal()

        async def work():
            return "done"

        result = await run_cancellable(work(), controller)
        controller.cancel()

        assert result == "done"
