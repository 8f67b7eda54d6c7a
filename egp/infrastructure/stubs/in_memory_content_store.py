"""In-memory content store stub.

Content-addressed dict for development and tests. Ids are derived from
the Blake3 digest of the canonical JSON encoding, so identical payloads
deduplicate exactly as they would on IPFS.

Tests can inject failures per operation (optionally only for payloads
of one record type) and slow every call down to exercise timeouts.

NOT suitable for production use.
"""

from __future__ import annotations

import asyncio
import base64
import json
from dataclasses import dataclass
from typing import Any

import blake3

from egp.application.ports.content_store import ContentStoreProtocol
from egp.domain.errors import StorageUnavailableError

# Multibase prefix for lowercase base32
BASE32_PREFIX = "b"


def content_id(payload: Any) -> str:
    """Compute the content id of a JSON payload."""
    encoded = json.dumps(payload, sort_keys=True, separators=(",", ":")).encode("utf-8")
    digest = blake3.blake3(encoded).digest()
    return BASE32_PREFIX + base64.b32encode(digest).decode("ascii").lower().rstrip("=")


@dataclass
class _InjectedFailure:
    operation: str
    payload_type: str | None
    remaining: int | None


class InMemoryContentStore(ContentStoreProtocol):
    """In-memory implementation of ContentStoreProtocol.

    Attributes:
        operations: (operation, content id) pairs in call order.
        delay_seconds: Artificial latency added to store/get/pin.
    """

    def __init__(self, delay_seconds: float = 0.0) -> None:
        self._objects: dict[str, str] = {}
        self._pinned: set[str] = set()
        self._failures: list[_InjectedFailure] = []
        self._lock = asyncio.Lock()
        self.operations: list[tuple[str, str]] = []
        self.delay_seconds = delay_seconds

    # =========================================================================
    # ContentStoreProtocol
    # =========================================================================

    async def store(self, payload: dict[str, Any]) -> str:
        await self._pause()
        self._maybe_fail("store", payload)
        object_id = content_id(payload)
        async with self._lock:
            self._objects.setdefault(
                object_id, json.dumps(payload, sort_keys=True, separators=(",", ":"))
            )
            self.operations.append(("store", object_id))
        return object_id

    async def get(self, object_id: str) -> Any | None:
        await self._pause()
        self._maybe_fail("get", None)
        async with self._lock:
            self.operations.append(("get", object_id))
            encoded = self._objects.get(object_id)
        return json.loads(encoded) if encoded is not None else None

    async def pin(self, object_id: str) -> None:
        await self._pause()
        async with self._lock:
            payload = self._objects.get(object_id)
        self._maybe_fail("pin", json.loads(payload) if payload is not None else None)
        async with self._lock:
            if object_id not in self._objects:
                raise StorageUnavailableError("pin", f"unknown object {object_id}")
            self._pinned.add(object_id)
            self.operations.append(("pin", object_id))

    async def status(self) -> dict[str, Any]:
        return {
            "connected": True,
            "backend": "memory",
            "objects": len(self._objects),
            "pinned": len(self._pinned),
        }

    # =========================================================================
    # Test helpers
    # =========================================================================

    def inject_failure(
        self,
        operation: str,
        *,
        payload_type: str | None = None,
        times: int | None = None,
    ) -> None:
        """Make an operation raise StorageUnavailableError.

        Args:
            operation: "store", "get" or "pin".
            payload_type: Only fail for payloads whose "type" matches.
            times: Fail this many times, then succeed. None fails forever.
        """
        self._failures.append(_InjectedFailure(operation, payload_type, times))

    def clear_failures(self) -> None:
        self._failures.clear()

    def put_raw(self, object_id: str, payload: Any) -> None:
        """Store a payload under an arbitrary id (for malformed-record tests)."""
        self._objects[object_id] = json.dumps(payload)

    def is_pinned(self, object_id: str) -> bool:
        return object_id in self._pinned

    def payloads_of_type(self, object_type: str) -> list[dict[str, Any]]:
        """Return every stored payload of a record type."""
        decoded = [json.loads(encoded) for encoded in self._objects.values()]
        return [p for p in decoded if isinstance(p, dict) and p.get("type") == object_type]

    def __len__(self) -> int:
        return len(self._objects)

    async def _pause(self) -> None:
        if self.delay_seconds:
            await asyncio.sleep(self.delay_seconds)

    def _maybe_fail(self, operation: str, payload: Any) -> None:
        payload_type = payload.get("type") if isinstance(payload, dict) else None
        for failure in self._failures:
            if failure.operation != operation:
                continue
            if failure.payload_type is not None and failure.payload_type != payload_type:
                continue
            if failure.remaining is not None:
                if failure.remaining <= 0:
                    continue
                failure.remaining -= 1
            raise StorageUnavailableError(operation, "injected failure")
