"""Storage errors.

The content store is an external collaborator with no transactions and
no delete. Two failure shapes matter to callers:
- StorageUnavailableError: the store could not be reached. Retrying the
  whole operation is safe; identical payloads deduplicate by address.
- PartialLinkFailureError: the primary record was persisted but one of
  its relationship edges was not. The record exists and is discoverable
  by id; graph linkage is incomplete.
"""

from __future__ import annotations

from egp.domain.exceptions import GovernanceError

DEFAULT_RETRY_AFTER_SECONDS = 30


class StorageUnavailableError(GovernanceError):
    """Raised when the content store fails transiently.

    Attributes:
        operation: The store operation that failed ("store", "get", "pin").
        retry_after_seconds: Hint for the caller before retrying.
    """

    def __init__(
        self,
        operation: str,
        message: str = "Content store temporarily unavailable",
        retry_after_seconds: int = DEFAULT_RETRY_AFTER_SECONDS,
    ) -> None:
        """Initialize the error.

        Args:
            operation: The store operation that failed.
            message: Detailed error message.
            retry_after_seconds: Hint for the caller before retrying.
        """
        self.operation = operation
        self.retry_after_seconds = retry_after_seconds
        super().__init__(f"{operation}: {message}")


class PartialLinkFailureError(GovernanceError):
    """Raised when an object was stored but a relationship edge write failed.

    Attributes:
        object_kind: Kind of the persisted primary record.
        object_id: Content id of the persisted primary record.
        relationship_type: The edge that could not be written.
        completed_relationships: Edges written before the failure, by type.
    """

    def __init__(
        self,
        object_kind: str,
        object_id: str,
        relationship_type: str,
        completed_relationships: dict[str, str] | None = None,
        cause: str = "",
    ) -> None:
        """Initialize the error.

        Args:
            object_kind: Kind of the persisted primary record.
            object_id: Content id of the persisted primary record.
            relationship_type: The edge that could not be written.
            completed_relationships: Edges already written, keyed by type.
            cause: Description of the underlying failure.
        """
        self.object_kind = object_kind
        self.object_id = object_id
        self.relationship_type = relationship_type
        self.completed_relationships = dict(completed_relationships or {})
        self.cause = cause
        detail = f" ({cause})" if cause else ""
        super().__init__(
            f"{object_kind} {object_id} persisted but {relationship_type} "
            f"relationship could not be written{detail}"
        )
