"""Unit tests for CancellationToken."""

import asyncio

import pytest

from egp.application.services.cancellation import (
    REASON_CANCELLED,
    REASON_DEADLINE,
    CancellationToken,
)
from egp.domain.errors import OperationCancelledError


async def slow(value: str, seconds: float = 1.0) -> str:
    await asyncio.sleep(seconds)
    return value


class TestCancellationToken:
    """Tests for cooperative cancellation."""

    @pytest.mark.asyncio
    async def test_runs_operation_to_completion(self) -> None:
        token = CancellationToken()
        assert await token.run("store", slow("ok", 0)) == "ok"
        assert token.reason() is None
        assert token.remaining() is None

    @pytest.mark.asyncio
    async def test_propagates_operation_errors(self) -> None:
        async def boom() -> None:
            raise RuntimeError("store failed")

        with pytest.raises(RuntimeError):
            await CancellationToken().run("store", boom())

    @pytest.mark.asyncio
    async def test_already_cancelled_never_starts(self) -> None:
        token = CancellationToken()
        token.cancel()

        with pytest.raises(OperationCancelledError) as exc_info:
            await token.run("store_propose", slow("never"), "bobj")

        assert exc_info.value.stage == "store_propose"
        assert exc_info.value.reason == REASON_CANCELLED
        assert exc_info.value.object_id == "bobj"

    @pytest.mark.asyncio
    async def test_deadline_interrupts_pending_call(self) -> None:
        token = CancellationToken.with_timeout(0.05)

        with pytest.raises(OperationCancelledError) as exc_info:
            await token.run("pin_sense", slow("late"))

        assert exc_info.value.reason == REASON_DEADLINE

    @pytest.mark.asyncio
    async def test_cancel_interrupts_pending_call(self) -> None:
        token = CancellationToken()
        loop = asyncio.get_running_loop()
        loop.call_later(0.02, token.cancel)

        with pytest.raises(OperationCancelledError) as exc_info:
            await token.run("store_adopt", slow("late"))

        assert exc_info.value.reason == REASON_CANCELLED
        assert token.is_cancelled

    def test_remaining_uses_injected_clock(self) -> None:
        now = [100.0]
        token = CancellationToken.with_timeout(5.0, clock=lambda: now[0])
        assert token.remaining() == pytest.approx(5.0)
        now[0] = 103.0
        assert token.remaining() == pytest.approx(2.0)
        now[0] = 110.0
        assert token.reason() == REASON_DEADLINE
