"""Proposal domain model.

A Proposal is a candidate solution responding to a Sense, bounded by a
sunset. It carries a frozen snapshot of the Sense (sense_context) taken
at proposal time; the snapshot is never refreshed, so the decision stays
auditable against the information available when it was made.

State Machine:
    PROPOSED -> ADOPTED -> ACTIVE -> COMPLETED
                                  -> EXPIRED
    PROPOSED -> EXPIRED
    ADOPTED  -> EXPIRED

EXPIRED is reached implicitly once now > sunset_date: readers use
effective_status() rather than trusting the stored status field.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
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
    read_instant,
)
from egp.domain.models.instant import ensure_utc, format_instant


class ProposalStatus(Enum):
    """Lifecycle status of a proposal."""

    PROPOSED = "proposed"
    ADOPTED = "adopted"
    ACTIVE = "active"
    COMPLETED = "completed"
    EXPIRED = "expired"

    def is_terminal(self) -> bool:
        """True for COMPLETED and EXPIRED."""
        return self in PROPOSAL_TERMINAL_STATES

    def valid_transitions(self) -> frozenset[ProposalStatus]:
        """Statuses reachable from this one."""
        return PROPOSAL_TRANSITIONS.get(self, frozenset())


PROPOSAL_TERMINAL_STATES: frozenset[ProposalStatus] = frozenset(
    {ProposalStatus.COMPLETED, ProposalStatus.EXPIRED}
)

PROPOSAL_TRANSITIONS: dict[ProposalStatus, frozenset[ProposalStatus]] = {
    ProposalStatus.PROPOSED: frozenset({ProposalStatus.ADOPTED, ProposalStatus.EXPIRED}),
    ProposalStatus.ADOPTED: frozenset({ProposalStatus.ACTIVE, ProposalStatus.EXPIRED}),
    ProposalStatus.ACTIVE: frozenset({ProposalStatus.COMPLETED, ProposalStatus.EXPIRED}),
    ProposalStatus.COMPLETED: frozenset(),
    ProposalStatus.EXPIRED: frozenset(),
}


class SolutionFormat(Enum):
    """Media type of a solution description."""

    PLAIN = "text/plain"
    MARKDOWN = "text/markdown"
    HTML = "text/html"


class ProposerType(Enum):
    """Kind of entity offering a proposal."""

    INDIVIDUAL = "individual"
    ORGANIZATION = "organization"
    AI = "ai"
    COLLECTIVE = "collective"


@dataclass(frozen=True)
class Solution:
    """The offered solution.

    Attributes:
        description: Summary of the approach.
        format: Media type of the description and content.
        content: Optional detailed content (diagrams, long text).
    """

    description: str
    format: SolutionFormat = SolutionFormat.MARKDOWN
    content: str | None = None

    def to_record(self) -> dict[str, Any]:
        return drop_none(
            {"description": self.description, "format": self.format.value, "content": self.content}
        )

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> Solution:
        return cls(
            description=str(record["description"]),
            format=SolutionFormat(record.get("format", SolutionFormat.MARKDOWN.value)),
            content=record.get("content"),
        )


@dataclass(frozen=True)
class Resources:
    """Resources a proposal needs and offers."""

    needed: tuple[str, ...] = ()
    offered: tuple[str, ...] = ()

    def to_record(self) -> dict[str, Any]:
        return {"needed": list(self.needed), "offered": list(self.offered)}

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> Resources:
        return cls(
            needed=tuple(record.get("needed") or ()),
            offered=tuple(record.get("offered") or ()),
        )


@dataclass(frozen=True)
class Proposer:
    """Who offers the proposal."""

    did: str | None = None
    type: ProposerType | None = None
    credentials: tuple[str, ...] = ()

    def to_record(self) -> dict[str, Any]:
        return drop_none(
            {
                "did": self.did,
                "type": self.type.value if self.type else None,
                "credentials": list(self.credentials) or None,
            }
        )

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> Proposer:
        proposer_type = record.get("type")
        return cls(
            did=record.get("did"),
            type=ProposerType(proposer_type) if proposer_type else None,
            credentials=tuple(record.get("credentials") or ()),
        )


@dataclass(frozen=True)
class SenseContext:
    """Snapshot of the referenced Sense taken at proposal time.

    Attributes:
        id: Content id of the Sense.
        issue: Sense issue at proposal time.
        scope: Sense scope at proposal time.
        urgency: Sense urgency at proposal time.
    """

    id: str
    issue: str
    scope: str
    urgency: str | None = None

    def to_record(self) -> dict[str, Any]:
        return drop_none(
            {"id": self.id, "issue": self.issue, "scope": self.scope, "urgency": self.urgency}
        )

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> SenseContext:
        return cls(
            id=str(record["id"]),
            issue=str(record["issue"]),
            scope=str(record["scope"]),
            urgency=record.get("urgency"),
        )


@dataclass(frozen=True, kw_only=True)
class Proposal(GovernanceObject):
    """A candidate solution responding to a Sense.

    Attributes:
        title: Proposal title.
        in_response_to: Sense reference ("/sense/{id}").
        solution: The offered solution.
        test: Free-text success criterion.
        sunset: The sunset duration as submitted (e.g. "P6M").
        sunset_date: Instant after which the proposal is no longer actionable.
        sense_context: Frozen snapshot of the referenced Sense.
        status: Stored lifecycle status (see effective_status()).
        resources: Optional needed/offered resources.
        proposer: Optional proposer description.
        metadata: Optional free-form metadata.
    """

    OBJECT_TYPE: ClassVar[ObjectType] = ObjectType.PROPOSE

    title: str
    in_response_to: str
    solution: Solution
    test: str
    sunset: str
    sunset_date: datetime
    sense_context: SenseContext
    status: ProposalStatus = ProposalStatus.PROPOSED
    resources: Resources | None = None
    proposer: Proposer | None = None
    metadata: dict[str, Any] | None = field(default=None)

    def __post_init__(self) -> None:
        """Normalize instants and detach metadata."""
        super().__post_init__()
        object.__setattr__(self, "sunset_date", ensure_utc(self.sunset_date))
        object.__setattr__(self, "metadata", frozen_json(self.metadata))

    def is_expired(self, now: datetime) -> bool:
        """True once now is past the sunset date."""
        return ensure_utc(now) > self.sunset_date

    def effective_status(self, now: datetime, adopted: bool = False) -> ProposalStatus:
        """Status as of now, recomputed from the sunset date.

        Args:
            now: Reference instant.
            adopted: Whether an adoption of this proposal is known. Only
                promotes PROPOSED to ADOPTED; later stored states win.

        Returns:
            EXPIRED if past the sunset (unless already COMPLETED),
            otherwise the stored status, promoted to ADOPTED if applicable.
        """
        if self.status == ProposalStatus.COMPLETED:
            return self.status
        if self.is_expired(now):
            return ProposalStatus.EXPIRED
        if adopted and self.status == ProposalStatus.PROPOSED:
            return ProposalStatus.ADOPTED
        return self.status

    def with_status(self, new_status: ProposalStatus) -> Proposal:
        """Return a copy with a new status, enforcing the transition matrix.

        The copy is a new record with its own content address; the
        original is never modified.

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
            "title": self.title,
            "in_response_to": self.in_response_to,
            "solution": self.solution.to_record(),
            "test": self.test,
            "sunset": self.sunset,
            "sunset_date": format_instant(self.sunset_date),
            "status": self.status.value,
            "sense_context": self.sense_context.to_record(),
            "resources": self.resources.to_record() if self.resources else None,
            "proposer": self.proposer.to_record() if self.proposer else None,
            "metadata": self.metadata,
        }
        return drop_none(payload)

    @classmethod
    def from_record(cls, record: Any) -> Proposal:
        """Read a stored payload.

        Raises:
            MalformedRecordError: If the payload is not a proposal record.
        """
        mapping, common = cls.read_envelope(record)
        kind = cls.OBJECT_TYPE.value
        try:
            resources = mapping.get("resources")
            proposer = mapping.get("proposer")
            return cls(
                **common,
                title=str(read_field(mapping, "title", kind)),
                in_response_to=str(read_field(mapping, "in_response_to", kind)),
                solution=Solution.from_record(read_field(mapping, "solution", kind)),
                test=str(read_field(mapping, "test", kind)),
                sunset=str(mapping.get("sunset", "")),
                sunset_date=read_instant(mapping, "sunset_date", kind),
                sense_context=SenseContext.from_record(
                    read_field(mapping, "sense_context", kind)
                ),
                status=ProposalStatus(mapping.get("status", ProposalStatus.PROPOSED.value)),
                resources=Resources.from_record(resources) if resources else None,
                proposer=Proposer.from_record(proposer) if proposer else None,
                metadata=mapping.get("metadata"),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise MalformedRecordError(kind, str(exc)) from exc
