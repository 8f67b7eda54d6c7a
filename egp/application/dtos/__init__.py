"""Data transfer objects for the application layer."""

from egp.application.dtos.governance_inputs import (
    AdoptInput,
    GovernanceInput,
    ProposeInput,
    SenseInput,
)
from egp.application.dtos.governance_results import (
    AdoptionResult,
    Conflict,
    Echo,
    ProposalResult,
    ResolvedObject,
    RevocationCondition,
    SenseResult,
)

__all__ = [
    "AdoptInput",
    "AdoptionResult",
    "Conflict",
    "Echo",
    "GovernanceInput",
    "ProposalResult",
    "ProposeInput",
    "ResolvedObject",
    "RevocationCondition",
    "SenseInput",
    "SenseResult",
]
