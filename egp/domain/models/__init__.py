"""Domain models for the EGP node."""

from egp.domain.models.adoption import (
    Adopter,
    AdopterType,
    Adoption,
    AdoptionStatus,
    DecisionProcess,
    DecisionProcessType,
    Modifications,
    Monitoring,
    ProposalContext,
    TrialPeriod,
)
from egp.domain.models.duration import Duration, add_to
from egp.domain.models.governance_object import (
    DEFAULT_NODE_ID,
    DEFAULT_PROTOCOL_VERSION,
    GovernanceObject,
    ObjectType,
    StoredObject,
    object_uri,
    parse_object_uri,
)
from egp.domain.models.learning_archive import LearningArchive
from egp.domain.models.proposal import (
    Proposal,
    Proposer,
    ProposerType,
    ProposalStatus,
    Resources,
    SenseContext,
    Solution,
    SolutionFormat,
)
from egp.domain.models.relationship import Relationship, RelationshipType
from egp.domain.models.sense import Reporter, ReporterType, Sense

__all__ = [
    "DEFAULT_NODE_ID",
    "DEFAULT_PROTOCOL_VERSION",
    "Adopter",
    "AdopterType",
    "Adoption",
    "AdoptionStatus",
    "DecisionProcess",
    "DecisionProcessType",
    "Duration",
    "GovernanceObject",
    "LearningArchive",
    "Modifications",
    "Monitoring",
    "ObjectType",
    "Proposal",
    "ProposalContext",
    "ProposalStatus",
    "Proposer",
    "ProposerType",
    "Relationship",
    "RelationshipType",
    "Reporter",
    "ReporterType",
    "Resources",
    "Sense",
    "SenseContext",
    "Solution",
    "SolutionFormat",
    "StoredObject",
    "TrialPeriod",
    "add_to",
    "object_uri",
    "parse_object_uri",
]
