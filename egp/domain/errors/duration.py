"""Duration errors.

Two distinct failures exist for durations:
- DurationParseError: the text is not a duration in the supported
  ISO 8601 subset, or it is empty where a span is required.
- InvalidDurationError: a lifecycle operation rejected a duration
  (unparsable, zero-length, or beyond the sunset ceiling).
"""

from __future__ import annotations

from egp.domain.exceptions import GovernanceError


class DurationParseError(GovernanceError, ValueError):
    """Raised when a duration string does not match the supported grammar.

    Attributes:
        text: The rejected input, as received.
        reason: Why it was rejected.
    """

    def __init__(self, text: object, reason: str) -> None:
        """Initialize the error.

        Args:
            text: The rejected input.
            reason: Why it was rejected.
        """
        self.text = text
        self.reason = reason
        super().__init__(f"Invalid duration {text!r}: {reason}")


class InvalidDurationError(GovernanceError):
    """Raised when an operation rejects a sunset, validity or frequency duration.

    Attributes:
        field: The input field holding the duration (e.g. "sunset").
        value: The duration text that was rejected.
        reason: Human-readable reason.
    """

    def __init__(self, field: str, value: str, reason: str) -> None:
        """Initialize the error.

        Args:
            field: The input field holding the duration.
            value: The duration text that was rejected.
            reason: Human-readable reason.
        """
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid {field} duration {value!r}: {reason}")
