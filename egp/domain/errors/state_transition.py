"""Status transition errors for proposals and adoptions."""

from __future__ import annotations

from egp.domain.exceptions import GovernanceError


class InvalidStatusTransitionError(GovernanceError):
    """Raised when a status change is not in the transition matrix.

    Attributes:
        record_kind: "propose" or "adopt".
        current: The current status value.
        requested: The requested status value.
        allowed: Status values reachable from current.
    """

    def __init__(
        self,
        record_kind: str,
        current: str,
        requested: str,
        allowed: list[str],
    ) -> None:
        """Initialize the error.

        Args:
            record_kind: "propose" or "adopt".
            current: The current status value.
            requested: The requested status value.
            allowed: Status values reachable from current.
        """
        self.record_kind = record_kind
        self.current = current
        self.requested = requested
        self.allowed = allowed
        allowed_text = ", ".join(allowed) if allowed else "none (terminal)"
        super().__init__(
            f"Cannot move {record_kind} from {current} to {requested}; "
            f"allowed: {allowed_text}"
        )
