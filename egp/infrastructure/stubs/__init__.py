"""In-memory stub adapters for development and testing."""

from egp.infrastructure.stubs.in_memory_content_store import InMemoryContentStore, content_id
from egp.infrastructure.stubs.in_memory_governance_index import InMemoryGovernanceIndex

__all__ = ["InMemoryContentStore", "InMemoryGovernanceIndex", "content_id"]
