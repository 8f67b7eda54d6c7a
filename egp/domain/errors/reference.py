"""Cross-reference errors.

A Proposal references a Sense and an Adoption references a Proposal.
Both references are checked at write time, against the content store,
for existence, kind and temporal validity.
"""

from __future__ import annotations

from datetime import datetime

from egp.domain.exceptions import GovernanceError


class ReferenceNotFoundError(GovernanceError):
    """Raised when a referenced object is absent or of the wrong kind.

    Attributes:
        uri: The reference as given by the caller (e.g. "/sense/b123").
        expected_kind: The kind the reference had to resolve to.
        reason: Why resolution failed.
    """

    def __init__(self, uri: str, expected_kind: str, reason: str) -> None:
        """Initialize the error.

        Args:
            uri: The reference as given by the caller.
            expected_kind: The kind the reference had to resolve to.
            reason: Why resolution failed.
        """
        self.uri = uri
        self.expected_kind = expected_kind
        self.reason = reason
        super().__init__(f"Referenced {expected_kind} {uri} not found: {reason}")


class ReferenceExpiredError(GovernanceError):
    """Raised when a referenced object's validity window has lapsed.

    Never downgraded into a success.

    Attributes:
        uri: The reference as given by the caller.
        expired_at: The instant the referenced object stopped being actionable.
    """

    def __init__(self, uri: str, expired_at: datetime) -> None:
        """Initialize the error.

        Args:
            uri: The reference as given by the caller.
            expired_at: When the referenced object expired.
        """
        self.uri = uri
        self.expired_at = expired_at
        super().__init__(f"Referenced object {uri} expired at {expired_at.isoformat()}")


class MalformedRecordError(GovernanceError):
    """Raised when a stored payload cannot be read as the expected record kind.

    Attributes:
        expected_kind: The record kind the caller tried to read.
        reason: What was wrong with the payload.
    """

    def __init__(self, expected_kind: str, reason: str) -> None:
        """Initialize the error.

        Args:
            expected_kind: The record kind the caller tried to read.
            reason: What was wrong with the payload.
        """
        self.expected_kind = expected_kind
        self.reason = reason
        super().__init__(f"Malformed {expected_kind} record: {reason}")
