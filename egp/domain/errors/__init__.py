"""Domain errors for the EGP node.

Provides specific exception classes for different failure scenarios.
All exceptions inherit from GovernanceError.
"""

from egp.domain.errors.cancellation import OperationCancelledError
from egp.domain.errors.duration import DurationParseError, InvalidDurationError
from egp.domain.errors.reference import (
    MalformedRecordError,
    ReferenceExpiredError,
    ReferenceNotFoundError,
)
from egp.domain.errors.state_transition import InvalidStatusTransitionError
from egp.domain.errors.storage import (
    PartialLinkFailureError,
    StorageUnavailableError,
)
from egp.domain.errors.validation import FieldIssue, InputValidationError

__all__: list[str] = [
    "DurationParseError",
    "FieldIssue",
    "InputValidationError",
    "InvalidDurationError",
    "InvalidStatusTransitionError",
    "MalformedRecordError",
    "OperationCancelledError",
    "PartialLinkFailureError",
    "ReferenceExpiredError",
    "ReferenceNotFoundError",
    "StorageUnavailableError",
]
