"""Cancellation errors."""

from __future__ import annotations

from egp.domain.exceptions import GovernanceError


class OperationCancelledError(GovernanceError):
    """Raised when a caller cancels an operation or its deadline passes.

    Attributes:
        stage: The step that was pending when the signal arrived.
        reason: "cancelled" or "deadline_exceeded".
        object_id: Id of the primary record if it was already persisted.
    """

    def __init__(self, stage: str, reason: str, object_id: str | None = None) -> None:
        """Initialize the error.

        Args:
            stage: The step that was pending when the signal arrived.
            reason: "cancelled" or "deadline_exceeded".
            object_id: Id of the primary record if already persisted.
        """
        self.stage = stage
        self.reason = reason
        self.object_id = object_id
        super().__init__(f"Operation {reason} during {stage}")
