"""Adoption domain model.

An Adoption is a commitment to trial a Proposal for a bounded period,
with a monitoring cadence. It carries a frozen snapshot of the Proposal
(proposal_context) taken at adoption time.

State Machine:
    ACTIVE -> MONITORING -> COMPLETED | REVOKED | EXPIRED
    ACTIVE -> COMPLETED | REVOKED | EXPIRED

REVOKED is driven externally, by a monitor reporting that a revocation
condition fired. EXPIRED is reached implicitly once now > trial end.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Any, ClassVar

from egp.domain.errors.reference import MalformedRecordError
from egp.domain.errors.state_transition import InvalidStatusTransitionError
from egp.domain.models.governance_object import (
    GovernanceObject,
    ObjectType,
    drop_none,
    frozen_json,
    read_field,
)
from egp.domain.models.instant import ensure_utc, format_instant, parse_instant


class AdoptionStatus(Enum):
    """Lifecycle status of an adoption."""

    ACTIVE = "active"
    MONITORING = "monitoring"
    COMPLETED = "completed"
    REVOKED = "revoked"
    EXPIRED = "expired"

    def is_terminal(self) -> bool:
        """True for COMPLETED, REVOKED and EXPIRED."""
        return self in ADOPTION_TERMINAL_STATES

    def valid_transitions(self) -> frozenset[AdoptionStatus]:
        """Statuses reachable from this one."""
        return ADOPTION_TRANSITIONS.get(self, frozenset())


ADOPTION_TERMINAL_STATES: frozenset[AdoptionStatus] = frozenset(
    {AdoptionStatus.COMPLETED, AdoptionStatus.REVOKED, AdoptionStatus.EXPIRED}
)

ADOPTION_TRANSITIONS: dict[AdoptionStatus, frozenset[AdoptionStatus]] = {
    AdoptionStatus.ACTIVE: frozenset({AdoptionStatus.MONITORING}) | ADOPTION_TERMINAL_STATES,
    AdoptionStatus.MONITORING: ADOPTION_TERMINAL_STATES,
    AdoptionStatus.COMPLETED: frozenset(),
    AdoptionStatus.REVOKED: frozenset(),
    AdoptionStatus.EXPIRED: frozenset(),
}


class DecisionProcessType(Enum):
    """How the adopting community reached its decision."""

    CONSENT = "consent"
    MAJORITY = "majority"
    ELDER_COUNCIL = "elder_council"
    TOKEN_VOTE = "token_vote"
    ORAL_TRADITION = "oral_tradition"
    CONSENSUS = "consensus"


class AdopterType(Enum):
    """Kind of entity adopting a proposal."""

    COMMUNITY = "community"
    ORGANIZATION = "organization"
    COLLECTIVE = "collective"
    INSTITUTION = "institution"


@dataclass(frozen=True)
class DecisionProcess:
    """Record of the adoption decision."""

    type: DecisionProcessType
    record: str | None = None
    participants: tuple[str, ...] | None = None
    unanimous_consent: bool | None = None
    spiritual_validation: str | None = None

    def to_record(self) -> dict[str, Any]:
        return drop_none(
            {
                "type": self.type.value,
                "record": self.record,
                "participants": list(self.participants) if self.participants is not None else None,
                "unanimous_consent": self.unanimous_consent,
                "spiritual_validation": self.spiritual_validation,
            }
        )

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> DecisionProcess:
        participants = record.get("participants")
        return cls(
            type=DecisionProcessType(record["type"]),
            record=record.get("record"),
            participants=tuple(participants) if participants is not None else None,
            unanimous_consent=record.get("unanimous_consent"),
            spiritual_validation=record.get("spiritual_validation"),
        )


@dataclass(frozen=True)
class Modifications:
    """Changes the adopters made to the proposal.

    Attributes:
        sunset: Replacement trial duration, counted from adoption time.
        test: Replacement success criterion.
        cultural_additions: Free-text local additions.
    """

    sunset: str | None = None
    test: str | None = None
    cultural_additions: str | None = None

    def to_record(self) -> dict[str, Any]:
        return drop_none(
            {"sunset": self.sunset, "test": self.test, "cultural_additions": self.cultural_additions}
        )

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> Modifications:
        return cls(
            sunset=record.get("sunset"),
            test=record.get("test"),
            cultural_additions=record.get("cultural_additions"),
        )


@dataclass(frozen=True)
class Monitoring:
    """Who watches the trial and how often.

    Attributes:
        who: Monitor identifiers (at least one).
        frequency: Review cadence as an ISO 8601 duration.
        metrics: What the monitors record.
        reporting_format: Free-text reporting format.
    """

    who: tuple[str, ...]
    frequency: str
    metrics: tuple[str, ...] = ()
    reporting_format: str | None = None

    def to_record(self) -> dict[str, Any]:
        return drop_none(
            {
                "who": list(self.who),
                "frequency": self.frequency,
                "metrics": list(self.metrics) or None,
                "reporting_format": self.reporting_format,
            }
        )

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> Monitoring:
        return cls(
            who=tuple(record["who"]),
            frequency=str(record["frequency"]),
            metrics=tuple(record.get("metrics") or ()),
            reporting_format=record.get("reporting_format"),
        )


@dataclass(frozen=True)
class Adopter:
    """Who adopts the proposal."""

    did: str | None = None
    type: AdopterType | None = None
    authority: str | None = None

    def to_record(self) -> dict[str, Any]:
        return drop_none(
            {"did": self.did, "type": self.type.value if self.type else None, "authority": self.authority}
        )

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> Adopter:
        adopter_type = record.get("type")
        return cls(
            did=record.get("did"),
            type=AdopterType(adopter_type) if adopter_type else None,
            authority=record.get("authority"),
        )


@dataclass(frozen=True)
class TrialPeriod:
    """Bounds of the trial.

    Attributes:
        starts: Adoption instant.
        ends: Final sunset (the proposal's, or the modified one).
        original_sunset: The proposal's sunset_date, kept for audit.
    """

    starts: datetime
    ends: datetime
    original_sunset: datetime

    def __post_init__(self) -> None:
        object.__setattr__(self, "starts", ensure_utc(self.starts))
        object.__setattr__(self, "ends", ensure_utc(self.ends))
        object.__setattr__(self, "original_sunset", ensure_utc(self.original_sunset))

    def to_record(self) -> dict[str, Any]:
        return {
            "starts": format_instant(self.starts),
            "ends": format_instant(self.ends),
            "original_sunset": format_instant(self.original_sunset),
        }

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> TrialPeriod:
        return cls(
            starts=parse_instant(record["starts"]),
            ends=parse_instant(record["ends"]),
            original_sunset=parse_instant(record["original_sunset"]),
        )


@dataclass(frozen=True)
class ProposalContext:
    """Snapshot of the adopted Proposal taken at adoption time."""

    id: str
    title: str
    sense_id: str
    original_test: str

    def to_record(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "sense_id": self.sense_id,
            "original_test": self.original_test,
        }

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> ProposalContext:
        return cls(
            id=str(record["id"]),
            title=str(record["title"]),
            sense_id=str(record["sense_id"]),
            original_test=str(record["original_test"]),
        )


@dataclass(frozen=True, kw_only=True)
class Adoption(GovernanceObject):
    """A commitment to trial a Proposal.

    Attributes:
        proposal_uri: Proposal reference ("/propose/{id}").
        decision_process: How the decision was reached.
        trial_period: Trial bounds.
        proposal_context: Frozen snapshot of the Proposal.
        status: Stored lifecycle status (see effective_status()).
        modifications: Optional changes to the proposal.
        monitoring: Optional monitoring arrangement.
        adopter: Optional adopter description.
        metadata: Optional free-form metadata.
    """

    OBJECT_TYPE: ClassVar[ObjectType] = ObjectType.ADOPT

    proposal_uri: str
    decision_process: DecisionProcess
    trial_period: TrialPeriod
    proposal_context: ProposalContext
    status: AdoptionStatus = AdoptionStatus.ACTIVE
    modifications: Modifications | None = None
    monitoring: Monitoring | None = None
    adopter: Adopter | None = None
    metadata: dict[str, Any] | None = None

    def __post_init__(self) -> None:
        super().__post_init__()
        object.__setattr__(self, "metadata", frozen_json(self.metadata))

    @property
    def effective_test(self) -> str:
        """The success criterion in force: the modified one, else the original."""
        if self.modifications and self.modifications.test:
            return self.modifications.test
        return self.proposal_context.original_test

    def effective_status(self, now: datetime) -> AdoptionStatus:
        """Status as of now: EXPIRED once the trial has ended, unless already terminal."""
        if self.status.is_terminal():
            return self.status
        if ensure_utc(now) > self.trial_period.ends:
            return AdoptionStatus.EXPIRED
        return self.status

    def with_status(self, new_status: AdoptionStatus) -> Adoption:
        """Return a copy with a new status, enforcing the transition matrix.

        Raises:
            InvalidStatusTransitionError: If the transition is not allowed.
        """
        if new_status not in self.status.valid_transitions():
            raise InvalidStatusTransitionError(
                record_kind=self.OBJECT_TYPE.value,
                current=self.status.value,
                requested=new_status.value,
                allowed=sorted(s.value for s in self.status.valid_transitions()),
            )
        return replace(self, status=new_status)

    def to_record(self) -> dict[str, Any]:
        """Serialize to the stored JSON payload."""
        payload = {
            **self.envelope(),
            "proposal_uri": self.proposal_uri,
            "decision_process": self.decision_process.to_record(),
            "modifications": self.modifications.to_record() if self.modifications else None,
            "monitoring": self.monitoring.to_record() if self.monitoring else None,
            "adopter": self.adopter.to_record() if self.adopter else None,
            "metadata": self.metadata,
            "status": self.status.value,
            "trial_period": self.trial_period.to_record(),
            "proposal_context": self.proposal_context.to_record(),
        }
        return drop_none(payload)

    @classmethod
    def from_record(cls, record: Any) -> Adoption:
        """Read a stored payload.

        Raises:
            MalformedRecordError: If the payload is not an adoption record.
        """
        mapping, common = cls.read_envelope(record)
        kind = cls.OBJECT_TYPE.value
        try:
            modifications = mapping.get("modifications")
            monitoring = mapping.get("monitoring")
            adopter = mapping.get("adopter")
            return cls(
                **common,
                proposal_uri=str(read_field(mapping, "proposal_uri", kind)),
                decision_process=DecisionProcess.from_record(
                    read_field(mapping, "decision_process", kind)
                ),
                trial_period=TrialPeriod.from_record(read_field(mapping, "trial_period", kind)),
                proposal_context=ProposalContext.from_record(
                    read_field(mapping, "proposal_context", kind)
                ),
                status=AdoptionStatus(mapping.get("status", AdoptionStatus.ACTIVE.value)),
                modifications=Modifications.from_record(modifications) if modifications else None,
                monitoring=Monitoring.from_record(monitoring) if monitoring else None,
                adopter=Adopter.from_record(adopter) if adopter else None,
                metadata=mapping.get("metadata"),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise MalformedRecordError(kind, str(exc)) from exc
