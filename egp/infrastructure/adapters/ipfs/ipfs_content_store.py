"""IPFS content store adapter.

Talks to a Kubo node over its RPC API with one shared httpx.AsyncClient:

    POST /api/v0/add       store a JSON document, returns its CID
    POST /api/v0/cat       read a document by CID
    POST /api/v0/pin/add   pin a CID
    POST /api/v0/version   health probe

Error mapping:
    - Transport errors, timeouts and 5xx responses raise
      StorageUnavailableError.
    - An add response without a Hash raises StorageUnavailableError.
    - cat on an unknown or invalid CID returns None.
"""

from __future__ import annotations

import json
from typing import Any

import httpx
import structlog

from egp.application.ports.content_store import ContentStoreProtocol
from egp.domain.errors import StorageUnavailableError
from egp.domain.errors.storage import DEFAULT_RETRY_AFTER_SECONDS

logger = structlog.get_logger()

RPC_PREFIX = "/api/v0"
DEFAULT_API_URL = "http://127.0.0.1:5001"

# Kubo error messages meaning "no such object" rather than "node broken"
_NOT_FOUND_MARKERS = ("not found", "invalid cid", "invalid path", "failed to decode")


class IpfsContentStore(ContentStoreProtocol):
    """ContentStoreProtocol implementation backed by a Kubo node."""

    def __init__(
        self,
        api_url: str = DEFAULT_API_URL,
        timeout_seconds: float = 10.0,
        retry_after_seconds: int = DEFAULT_RETRY_AFTER_SECONDS,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the adapter.

        Args:
            api_url: Kubo RPC base URL.
            timeout_seconds: Per-request timeout.
            retry_after_seconds: Retry hint attached to storage errors.
            client: Optional preconfigured client (tests pass a MockTransport).
        """
        self._base_url = api_url.rstrip("/")
        self._retry_after = retry_after_seconds
        self._client = client or httpx.AsyncClient(
            base_url=self._base_url, timeout=timeout_seconds
        )

    async def close(self) -> None:
        """Close the shared HTTP client."""
        await self._client.aclose()

    async def store(self, payload: dict[str, Any]) -> str:
        content = json.dumps(payload, indent=2).encode("utf-8")
        response = await self._rpc(
            "store",
            "add",
            params={"cid-version": "1", "pin": "false"},
            files={"file": ("data.json", content, "application/json")},
        )
        self._raise_for_status("store", response)
        cid = self._added_cid(response)
        logger.debug("ipfs_object_stored", cid=cid, size=len(content))
        return cid

    async def get(self, object_id: str) -> Any | None:
        response = await self._rpc("get", "cat", params={"arg": object_id})
        if response.status_code >= 400 and self._is_not_found(response):
            logger.debug("ipfs_object_not_found", cid=object_id)
            return None
        self._raise_for_status("get", response)
        text = response.text
        try:
            return json.loads(text)
        except json.JSONDecodeError:
            return text

    async def pin(self, object_id: str) -> None:
        response = await self._rpc("pin", "pin/add", params={"arg": object_id})
        self._raise_for_status("pin", response)
        logger.debug("ipfs_object_pinned", cid=object_id)

    async def status(self) -> dict[str, Any]:
        try:
            response = await self._client.post(f"{RPC_PREFIX}/version")
            response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.warning("ipfs_status_unavailable", error=str(exc))
            return {"connected": False, "backend": "ipfs", "api_url": self._base_url}
        return {
            "connected": True,
            "backend": "ipfs",
            "api_url": self._base_url,
            "version": response.json().get("Version"),
        }

    async def _rpc(self, operation: str, command: str, **kwargs: Any) -> httpx.Response:
        try:
            return await self._client.post(f"{RPC_PREFIX}/{command}", **kwargs)
        except httpx.TimeoutException as exc:
            logger.error("ipfs_request_timeout", operation=operation)
            raise StorageUnavailableError(
                operation, "IPFS request timed out", self._retry_after
            ) from exc
        except httpx.RequestError as exc:
            logger.error("ipfs_request_failed", operation=operation, error=str(exc))
            raise StorageUnavailableError(
                operation, f"IPFS request failed: {exc}", self._retry_after
            ) from exc

    def _raise_for_status(self, operation: str, response: httpx.Response) -> None:
        if response.status_code < 400:
            return
        message = self._error_message(response)
        logger.error(
            "ipfs_rpc_error",
            operation=operation,
            status_code=response.status_code,
            message=message,
        )
        raise StorageUnavailableError(
            operation, f"IPFS returned {response.status_code}: {message}", self._retry_after
        )

    def _added_cid(self, response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            body = None
        cid = body.get("Hash") if isinstance(body, dict) else None
        if not isinstance(cid, str) or not cid:
            logger.error("ipfs_add_without_hash", body=response.text[:200])
            raise StorageUnavailableError(
                "store", "IPFS add returned no Hash", self._retry_after
            )
        return cid

    def _is_not_found(self, response: httpx.Response) -> bool:
        message = self._error_message(response).lower()
        return any(marker in message for marker in _NOT_FOUND_MARKERS)

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text
        if isinstance(body, dict):
            return str(body.get("Message", body))
        return str(body)
