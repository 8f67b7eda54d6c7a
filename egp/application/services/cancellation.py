"""Cancellation tokens for lifecycle operations.

A CancellationToken carries an explicit cancel signal and an optional
deadline. The lifecycle service runs every content-store call through
CancellationToken.run(); when the token fires, the pending call is
cancelled and OperationCancelledError is raised instead of a generic
failure.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable
from typing import TypeVar

from egp.domain.errors import OperationCancelledError

T = TypeVar("T")

REASON_CANCELLED = "cancelled"
REASON_DEADLINE = "deadline_exceeded"


class CancellationToken:
    """Cooperative cancellation signal with an optional deadline.

    Attributes:
        deadline: Monotonic instant after which the token counts as fired.
    """

    def __init__(
        self,
        deadline: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the token.

        Args:
            deadline: Monotonic deadline, or None for no deadline.
            clock: Monotonic clock the deadline is measured against.
        """
        self.deadline = deadline
        self._clock = clock
        self._event = asyncio.Event()

    @classmethod
    def with_timeout(
        cls, seconds: float, clock: Callable[[], float] = time.monotonic
    ) -> CancellationToken:
        """Create a token that fires `seconds` from now."""
        return cls(deadline=clock() + seconds, clock=clock)

    def cancel(self) -> None:
        """Fire the token. Pending and future run() calls raise."""
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def remaining(self) -> float | None:
        """Seconds until the deadline, never negative, or None without one."""
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - self._clock())

    def reason(self) -> str | None:
        """Why the token has fired, or None if it has not."""
        if self._event.is_set():
            return REASON_CANCELLED
        remaining = self.remaining()
        if remaining is not None and remaining <= 0:
            return REASON_DEADLINE
        return None

    async def run(
        self, stage: str, operation: Awaitable[T], object_id: str | None = None
    ) -> T:
        """Await an operation unless the token fires first.

        Args:
            stage: Name of the step, reported in the error.
            operation: The awaitable to run.
            object_id: Id of an already persisted record, reported in the error.

        Returns:
            The operation's result.

        Raises:
            OperationCancelledError: If the token fired before the
                operation completed. The operation is cancelled.
        """
        fired = self.reason()
        if fired is not None:
            if asyncio.iscoroutine(operation):
                operation.close()
            raise OperationCancelledError(stage, fired, object_id)

        task = asyncio.ensure_future(operation)

        waiter = asyncio.ensure_future(self._event.wait())
        try:
            done, _ = await asyncio.wait(
                {task, waiter},
                timeout=self.remaining(),
                return_when=asyncio.FIRST_COMPLETED,
            )
        except asyncio.CancelledError:
            task.cancel()
            raise
        finally:
            waiter.cancel()

        if task in done:
            return task.result()

        task.cancel()
        raise OperationCancelledError(stage, self.reason() or REASON_DEADLINE, object_id)
