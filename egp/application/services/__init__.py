"""Application services for the EGP node."""

from egp.application.services.action_suggestion_service import RuleBasedActionSuggester
from egp.application.services.cancellation import CancellationToken
from egp.application.services.conflict_detection_service import RuleBasedConflictDetector
from egp.application.services.governance_lifecycle_service import GovernanceLifecycleService
from egp.application.services.input_validation import validate_input
from egp.application.services.learning_archive_service import LearningArchiveService
from egp.application.services.ritual_suggestion_service import ScopeRitualSuggester
from egp.application.services.schedule_service import (
    generate_review_schedule,
    generate_revocation_conditions,
)
from egp.application.services.similarity_service import OverlapSimilarityFinder
from egp.application.services.time_authority_service import SystemTimeAuthority

__all__ = [
    "CancellationToken",
    "GovernanceLifecycleService",
    "LearningArchiveService",
    "OverlapSimilarityFinder",
    "RuleBasedActionSuggester",
    "RuleBasedConflictDetector",
    "ScopeRitualSuggester",
    "SystemTimeAuthority",
    "generate_review_schedule",
    "generate_revocation_conditions",
    "validate_input",
]
