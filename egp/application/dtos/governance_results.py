"""Results returned by the lifecycle service and its advisors."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from egp.domain.models import GovernanceObject, ObjectType, TrialPeriod, object_uri
from egp.domain.models.governance_object import drop_none


@dataclass(frozen=True)
class Echo:
    """A prior object heuristically similar to a new one.

    Attributes:
        id: Content id of the similar object.
        kind: Its object kind.
        similarity: Score in [0, 1].
        reason: Short label of what matched (e.g. "shared_tags").
    """

    id: str
    kind: ObjectType
    similarity: float
    reason: str

    @property
    def uri(self) -> str:
        return object_uri(self.kind, self.id)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "uri": self.uri,
            "similarity": round(self.similarity, 3),
            "reason": self.reason,
        }


@dataclass(frozen=True)
class Conflict:
    """A proposal that may compete with a new proposal.

    Attributes:
        id: Content id of the other proposal.
        reason: Rule that fired ("overlaps_resource_need", "concurrent_trial_in_scope").
        severity: "low", "medium" or "high".
        details: Human-readable explanation.
    """

    id: str
    reason: str
    severity: str
    details: str

    def to_dict(self) -> dict[str, str]:
        return {
            "id": self.id,
            "reason": self.reason,
            "severity": self.severity,
            "details": self.details,
        }


@dataclass(frozen=True)
class RevocationCondition:
    """A rule under which a trial should be reviewed, reverted or halted.

    Attributes:
        condition: The triggering condition (serialized as "if").
        action: What happens when it fires (serialized as "then").
        recorded_by: Who records the measurement.
        check_frequency: How often to check, as an ISO 8601 duration.
        description: Optional explanation of the rule.
    """

    condition: str
    action: str
    recorded_by: str | None = None
    check_frequency: str | None = None
    description: str | None = None

    def to_dict(self) -> dict[str, str]:
        return drop_none(
            {
                "if": self.condition,
                "then": self.action,
                "recorded_by": self.recorded_by,
                "check_frequency": self.check_frequency,
                "description": self.description,
            }
        )


@dataclass(frozen=True)
class SenseResult:
    """Outcome of sense().

    Attributes:
        id: Content id of the stored sense.
        timestamp: Creation instant.
        related: Related prior signals.
        actions: Suggested next actions.
        degraded: Advisors that failed and were replaced by empty output.
    """

    id: str
    timestamp: datetime
    related: tuple[Echo, ...] = ()
    actions: dict[str, str] = field(default_factory=dict)
    degraded: tuple[str, ...] = ()

    @property
    def uri(self) -> str:
        return object_uri(ObjectType.SENSE, self.id)

    @property
    def relates_to(self) -> list[str]:
        return [echo.uri for echo in self.related]

    @property
    def echoes(self) -> int:
        return len(self.related)


@dataclass(frozen=True)
class ProposalResult:
    """Outcome of propose().

    Attributes:
        id: Content id of the stored proposal.
        timestamp: Creation instant.
        sunset_date: When the proposal stops being actionable.
        relationship_id: Content id of the responds_to edge.
        similar: Similar prior proposals.
        conflicts: Potentially competing proposals.
        rituals: Suggested adoption rituals.
        degraded: Advisors that failed and were replaced by empty output.
    """

    id: str
    timestamp: datetime
    sunset_date: datetime
    relationship_id: str
    similar: tuple[Echo, ...] = ()
    conflicts: tuple[Conflict, ...] = ()
    rituals: dict[str, str] = field(default_factory=dict)
    degraded: tuple[str, ...] = ()

    @property
    def uri(self) -> str:
        return object_uri(ObjectType.PROPOSE, self.id)

    @property
    def echoes(self) -> int:
        return len(self.similar)


@dataclass(frozen=True)
class AdoptionResult:
    """Outcome of adopt().

    Attributes:
        id: Content id of the stored adoption.
        timestamp: Creation instant.
        trial_period: Trial bounds.
        review_at: Review dates within the trial.
        revocation_conditions: Rules derived from the success criterion.
        relationship_ids: Edge ids keyed by relationship type.
        learning_archive: "/ipfs/{id}" of the archive skeleton, if created.
        degraded: Best-effort steps that failed.
    """

    id: str
    timestamp: datetime
    trial_period: TrialPeriod
    review_at: tuple[datetime, ...]
    revocation_conditions: tuple[RevocationCondition, ...]
    relationship_ids: dict[str, str]
    learning_archive: str | None = None
    degraded: tuple[str, ...] = ()

    @property
    def uri(self) -> str:
        return object_uri(ObjectType.ADOPT, self.id)


@dataclass(frozen=True)
class ResolvedObject:
    """A stored object read back through resolve().

    Attributes:
        id: Content id.
        kind: Object kind.
        record: The decoded record.
        effective_status: Status recomputed against the clock, for
            proposals and adoptions; for senses "active" or "expired".
    """

    id: str
    kind: ObjectType
    record: GovernanceObject
    effective_status: str

    @property
    def uri(self) -> str:
        return object_uri(self.kind, self.id)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            **self.record.to_record(),
            "effective_status": self.effective_status,
        }

