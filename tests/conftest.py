"""
Pytest configuration and shared fixtures for EGP tests.

Testing Standards:
- Async tests run under pytest-asyncio (auto mode enabled in pyproject.toml)
- Use AsyncMock for async collaborator mocking
- Unit tests go in tests/unit/
- Integration tests go in tests/integration/
"""

import pytest

from egp.application.services.governance_lifecycle_service import GovernanceLifecycleService
from egp.config.governance_config import GovernanceConfig
from egp.infrastructure.monitoring.metrics import GovernanceMetrics
from egp.infrastructure.stubs import InMemoryContentStore, InMemoryGovernanceIndex
from tests.helpers import FROZEN_AT, FakeTimeAuthority


@pytest.fixture
def project_version() -> str:
    """Provide the current project version for tests."""
    from egp import __version__

    return __version__


@pytest.fixture
def fake_time_authority() -> FakeTimeAuthority:
    """Clock frozen at 2026-03-01T12:00Z."""
    return FakeTimeAuthority(frozen_at=FROZEN_AT)


@pytest.fixture
def content_store() -> InMemoryContentStore:
    return InMemoryContentStore()


@pytest.fixture
def governance_index() -> InMemoryGovernanceIndex:
    return InMemoryGovernanceIndex()


@pytest.fixture
def governance_config() -> GovernanceConfig:
    return GovernanceConfig(node_id="test-node", advisor_timeout_seconds=0.5)


@pytest.fixture
def governance_metrics() -> GovernanceMetrics:
    return GovernanceMetrics()


@pytest.fixture
def lifecycle_service(
    content_store: InMemoryContentStore,
    governance_index: InMemoryGovernanceIndex,
    fake_time_authority: FakeTimeAuthority,
    governance_config: GovernanceConfig,
    governance_metrics: GovernanceMetrics,
) -> GovernanceLifecycleService:
    """Lifecycle service over in-memory collaborators and a frozen clock."""
    return GovernanceLifecycleService(
        content_store=content_store,
        governance_index=governance_index,
        time_authority=fake_time_authority,
        config=governance_config,
        metrics=governance_metrics,
    )
