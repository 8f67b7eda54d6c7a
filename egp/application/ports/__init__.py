"""Ports (interfaces) for the application layer."""

from egp.application.ports.advisors import (
    ActionSuggesterProtocol,
    ConflictDetectorProtocol,
    RitualSuggesterProtocol,
    SimilarityFinderProtocol,
)
from egp.application.ports.content_store import ContentStoreProtocol
from egp.application.ports.governance_index import GovernanceIndexProtocol
from egp.application.ports.time_authority import TimeAuthorityProtocol

__all__ = [
    "ActionSuggesterProtocol",
    "ConflictDetectorProtocol",
    "ContentStoreProtocol",
    "GovernanceIndexProtocol",
    "RitualSuggesterProtocol",
    "SimilarityFinderProtocol",
    "TimeAuthorityProtocol",
]
