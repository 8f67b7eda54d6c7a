"""Governance API response models.

Request bodies are validated by the application DTOs (see
egp.application.dtos.governance_inputs) so that every input error is
reported as a 400 with a field list. The models here only shape the
201 responses.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer

from egp.application.dtos import (
    AdoptionResult,
    Conflict,
    Echo,
    ProposalResult,
    RevocationCondition,
    SenseResult,
)
from egp.domain.models.instant import format_instant

# ISO 8601 with millisecond precision and Z suffix
DateTimeWithZ = Annotated[datetime, PlainSerializer(format_instant, return_type=str)]


class EchoResponse(BaseModel):
    """A prior object similar to the new one."""

    id: str
    uri: str
    similarity: float
    reason: str

    @classmethod
    def from_echo(cls, echo: Echo) -> EchoResponse:
        return cls(**echo.to_dict())


class ConflictResponse(BaseModel):
    """A proposal that may compete with the new one."""

    id: str
    reason: str
    severity: str
    details: str

    @classmethod
    def from_conflict(cls, conflict: Conflict) -> ConflictResponse:
        return cls(**conflict.to_dict())


class SenseResponse(BaseModel):
    """Response for POST /sense.

    Attributes:
        id: Content id of the stored sense.
        timestamp: Creation instant.
        relates_to: URIs of related prior signals.
        echoes: Number of related prior signals.
        actions: Suggested next actions, keyed by action name.
        degraded: Advisors that failed during this request.
    """

    id: str
    timestamp: DateTimeWithZ
    relates_to: list[str] = Field(default_factory=list)
    echoes: int = 0
    actions: dict[str, str] = Field(default_factory=dict)
    degraded: list[str] = Field(default_factory=list)

    @classmethod
    def from_result(cls, result: SenseResult) -> SenseResponse:
        return cls(
            id=result.id,
            timestamp=result.timestamp,
            relates_to=result.relates_to,
            echoes=result.echoes,
            actions=result.actions,
            degraded=list(result.degraded),
        )


class ProposalResponse(BaseModel):
    """Response for POST /propose.

    Attributes:
        id: Content id of the stored proposal.
        timestamp: Creation instant.
        sunset_date: When the proposal stops being adoptable.
        echoes: Number of similar prior proposals.
        similar: The similar prior proposals.
        conflicts: Potentially competing proposals.
        rituals: Suggested adoption rituals.
        relationship_id: Content id of the responds_to edge.
        degraded: Advisors that failed during this request.
    """

    id: str
    timestamp: DateTimeWithZ
    sunset_date: DateTimeWithZ
    echoes: int = 0
    similar: list[EchoResponse] = Field(default_factory=list)
    conflicts: list[ConflictResponse] = Field(default_factory=list)
    rituals: dict[str, str] = Field(default_factory=dict)
    relationship_id: str
    degraded: list[str] = Field(default_factory=list)

    @classmethod
    def from_result(cls, result: ProposalResult) -> ProposalResponse:
        return cls(
            id=result.id,
            timestamp=result.timestamp,
            sunset_date=result.sunset_date,
            echoes=result.echoes,
            similar=[EchoResponse.from_echo(echo) for echo in result.similar],
            conflicts=[ConflictResponse.from_conflict(c) for c in result.conflicts],
            rituals=result.rituals,
            relationship_id=result.relationship_id,
            degraded=list(result.degraded),
        )


class TrialPeriodResponse(BaseModel):
    """Trial bounds and the review dates inside them."""

    starts: DateTimeWithZ
    ends: DateTimeWithZ
    original_sunset: DateTimeWithZ | None = None
    review_at: list[DateTimeWithZ] = Field(default_factory=list)


class RevocationConditionResponse(BaseModel):
    """A rule for reviewing, reverting or halting a trial.

    Serialized with "if"/"then" keys.
    """

    model_config = ConfigDict(populate_by_name=True)

    condition: str = Field(alias="if")
    action: str = Field(alias="then")
    recorded_by: str | None = None
    check_frequency: str | None = None
    description: str | None = None

    @classmethod
    def from_condition(cls, condition: RevocationCondition) -> RevocationConditionResponse:
        return cls(
            condition=condition.condition,
            action=condition.action,
            recorded_by=condition.recorded_by,
            check_frequency=condition.check_frequency,
            description=condition.description,
        )


class AdoptionResponse(BaseModel):
    """Response for POST /adopt.

    Attributes:
        id: Content id of the stored adoption.
        timestamp: Creation instant.
        trial_period: Trial bounds and review dates.
        revocation_conditions: Rules derived from the success criterion.
        learning_archive: "/ipfs/{id}" of the archive skeleton, or None.
        relationship_ids: Edge ids keyed by relationship type.
        degraded: Best-effort steps that failed during this request.
    """

    id: str
    timestamp: DateTimeWithZ
    trial_period: TrialPeriodResponse
    revocation_conditions: list[RevocationConditionResponse]
    learning_archive: str | None = None
    relationship_ids: dict[str, str]
    degraded: list[str] = Field(default_factory=list)

    @classmethod
    def from_result(cls, result: AdoptionResult) -> AdoptionResponse:
        period = result.trial_period
        return cls(
            id=result.id,
            timestamp=result.timestamp,
            trial_period=TrialPeriodResponse(
                starts=period.starts,
                ends=period.ends,
                original_sunset=period.original_sunset,
                review_at=list(result.review_at),
            ),
            revocation_conditions=[
                RevocationConditionResponse.from_condition(c)
                for c in result.revocation_conditions
            ],
            learning_archive=result.learning_archive,
            relationship_ids=result.relationship_ids,
            degraded=list(result.degraded),
        )
