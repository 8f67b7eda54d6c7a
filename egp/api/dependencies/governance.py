"""Governance API dependencies.

Module-level singletons behind get_*() providers. Routes depend on the
providers, so tests replace them with app.dependency_overrides or the
set_*() helpers.

The content store backend is chosen by EGP_STORE_BACKEND: "memory" wires
InMemoryContentStore, "ipfs" wires IpfsContentStore against
IPFS_API_URL. The governance index is always in-memory.
"""

from __future__ import annotations

from egp.application.ports.content_store import ContentStoreProtocol
from egp.application.ports.governance_index import GovernanceIndexProtocol
from egp.application.ports.time_authority import TimeAuthorityProtocol
from egp.application.services.governance_lifecycle_service import GovernanceLifecycleService
from egp.application.services.time_authority_service import SystemTimeAuthority
from egp.bootstrap.metrics import get_governance_metrics
from egp.config.governance_config import GovernanceConfig, StoreBackend
from egp.infrastructure.adapters.ipfs import IpfsContentStore
from egp.infrastructure.stubs import InMemoryContentStore, InMemoryGovernanceIndex

_governance_config: GovernanceConfig | None = None
_content_store: ContentStoreProtocol | None = None
_governance_index: GovernanceIndexProtocol | None = None
_time_authority: TimeAuthorityProtocol | None = None
_lifecycle_service: GovernanceLifecycleService | None = None


def get_governance_config() -> GovernanceConfig:
    """Get node configuration, read once from the environment."""
    global _governance_config
    if _governance_config is None:
        _governance_config = GovernanceConfig.from_environment()
    return _governance_config


def get_content_store() -> ContentStoreProtocol:
    """Get the shared content store client.

    Returns:
        IpfsContentStore when EGP_STORE_BACKEND=ipfs, else InMemoryContentStore.
    """
    global _content_store
    if _content_store is None:
        config = get_governance_config()
        if config.store_backend == StoreBackend.IPFS:
            _content_store = IpfsContentStore(
                api_url=config.ipfs_api_url,
                timeout_seconds=config.ipfs_timeout_seconds,
                retry_after_seconds=config.storage_retry_after_seconds,
            )
        else:
            _content_store = InMemoryContentStore()
    return _content_store


def get_governance_index() -> GovernanceIndexProtocol:
    global _governance_index
    if _governance_index is None:
        _governance_index = InMemoryGovernanceIndex()
    return _governance_index


def get_time_authority() -> TimeAuthorityProtocol:
    global _time_authority
    if _time_authority is None:
        _time_authority = SystemTimeAuthority()
    return _time_authority


def get_lifecycle_service() -> GovernanceLifecycleService:
    """Get the lifecycle service wired to the shared collaborators."""
    global _lifecycle_service
    if _lifecycle_service is None:
        _lifecycle_service = GovernanceLifecycleService(
            content_store=get_content_store(),
            governance_index=get_governance_index(),
            time_authority=get_time_authority(),
            config=get_governance_config(),
            metrics=get_governance_metrics(),
        )
    return _lifecycle_service


def set_governance_config(config: GovernanceConfig) -> None:
    """Set custom configuration (testing/override)."""
    global _governance_config
    _governance_config = config


def set_content_store(store: ContentStoreProtocol) -> None:
    """Set custom content store (testing/override)."""
    global _content_store
    _content_store = store


def set_time_authority(time_authority: TimeAuthorityProtocol) -> None:
    """Set custom time authority (testing/override)."""
    global _time_authority
    _time_authority = time_authority


async def close_governance_dependencies() -> None:
    """Release network clients held by the singletons."""
    if isinstance(_content_store, IpfsContentStore):
        await _content_store.close()


def reset_governance_dependencies() -> None:
    """Reset all singletons (testing cleanup)."""
    global _governance_config
    global _content_store
    global _governance_index
    global _time_authority
    global _lifecycle_service
    _governance_config = None
    _content_store = None
    _governance_index = None
    _time_authority = None
    _lifecycle_service = None
