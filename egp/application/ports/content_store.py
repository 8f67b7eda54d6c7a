"""Content store port.

The content store is content-addressed and append-only: identical
payloads yield identical ids, nothing is ever updated or deleted, and
there are no transactions. Implementations must be safe to share across
concurrent requests.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import Any, Protocol


class ContentStoreProtocol(Protocol):
    """Protocol for the content-addressed object store.

    Implementations:
        InMemoryContentStore: blake3-addressed dict, for tests and development.
        IpfsContentStore: Kubo RPC API over httpx.
    """

    @abstractmethod
    async def store(self, payload: dict[str, Any]) -> str:
        """Persist a JSON payload.

        Args:
            payload: JSON-ready record.

        Returns:
            The content id assigned to the payload.

        Raises:
            StorageUnavailableError: If the store cannot be reached.
        """
        ...

    @abstractmethod
    async def get(self, object_id: str) -> Any | None:
        """Fetch a payload by content id.

        Returns:
            The decoded payload, or None if no object has this id.

        Raises:
            StorageUnavailableError: If the store cannot be reached.
        """
        ...

    @abstractmethod
    async def pin(self, object_id: str) -> None:
        """Protect an object from garbage collection.

        Raises:
            StorageUnavailableError: If the store cannot be reached.
        """
        ...

    @abstractmethod
    async def status(self) -> dict[str, Any]:
        """Report backend health for the /health endpoint.

        Never raises; an unreachable backend reports {"connected": False}.
        """
        ...
