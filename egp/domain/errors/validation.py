"""Input validation errors.

Raised when inbound sense/propose/adopt input is malformed or out of
range. These errors are always recoverable locally: they are returned
to the caller (HTTP 400) and never retried.
"""

from __future__ import annotations

from dataclasses import dataclass

from egp.domain.exceptions import GovernanceError


@dataclass(frozen=True)
class FieldIssue:
    """A single validation problem located at a field path.

    Attributes:
        path: Dotted path to the offending field (e.g. "solution.description").
            Empty string for problems with the payload as a whole.
        message: Human-readable description of the problem.
    """

    path: str
    message: str

    def to_dict(self) -> dict[str, str]:
        """Serialize for error responses."""
        return {"path": self.path, "message": self.message}


class InputValidationError(GovernanceError):
    """Raised when raw input fails validation for its object kind.

    Attributes:
        kind: The object kind being validated ("sense", "propose", "adopt").
        issues: Every problem found, in the order the validator reported them.
    """

    def __init__(self, kind: str, issues: list[FieldIssue]) -> None:
        """Initialize the error.

        Args:
            kind: The object kind being validated.
            issues: The validation problems (at least one).
        """
        self.kind = kind
        self.issues = list(issues)
        first = self.issues[0] if self.issues else FieldIssue("", "invalid input")
        location = f"{first.path}: " if first.path else ""
        super().__init__(f"Invalid {kind} input: {location}{first.message}")
