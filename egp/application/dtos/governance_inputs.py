"""Inbound request models for sense, propose and adopt.

Pydantic models with the field bounds of the protocol. Unknown keys are
rejected. Duration-valued fields must match the ISO 8601 subset accepted
by Duration.parse; whether a duration is usable (non-zero, within the
sunset ceiling) is decided by the lifecycle service, not here.

These models only check shape. They never touch storage.
"""

from __future__ import annotations

from typing import Annotated, Any, Union

from pydantic import AfterValidator, BaseModel, ConfigDict, Field

from egp.domain.models import (
    Adopter,
    AdopterType,
    DecisionProcess,
    DecisionProcessType,
    Duration,
    Modifications,
    Monitoring,
    Proposer,
    ProposerType,
    Reporter,
    ReporterType,
    Resources,
    Solution,
    SolutionFormat,
)

SENSE_URI_PATTERN = r"^/sense/[a-zA-Z0-9]+$"
PROPOSAL_URI_PATTERN = r"^/propose/[a-zA-Z0-9]+$"
URGENCY_PATTERN = r"^[1-5]/5$"

NonEmptyStr = Annotated[str, Field(min_length=1)]
Tag = Annotated[str, Field(min_length=1, max_length=50)]
ResourceName = Annotated[str, Field(min_length=1, max_length=100)]


def _check_duration(value: str) -> str:
    Duration.parse(value)
    return value


DurationText = Annotated[str, AfterValidator(_check_duration)]


class _InputModel(BaseModel):
    model_config = ConfigDict(extra="forbid")


class ReporterInput(_InputModel):
    """Who reported a signal."""

    did: NonEmptyStr | None = None
    type: ReporterType | None = None
    location: NonEmptyStr | None = None

    def to_domain(self) -> Reporter:
        return Reporter(did=self.did, type=self.type, location=self.location)


class SenseInput(_InputModel):
    """Request body of POST /sense.

    Attributes:
        issue: Issue label (3-100 chars).
        scope: Scope (3-100 chars), e.g. "village:llajta".
        title: Optional title (up to 200 chars).
        evidence: Optional free-form evidence.
        urgency: Optional "1/5" to "5/5".
        tags: Up to 10 tags of up to 50 chars.
        reporter: Optional reporter description.
        metadata: Optional free-form metadata.
        valid_for: Optional validity window as an ISO 8601 duration.
    """

    issue: str = Field(..., min_length=3, max_length=100)
    scope: str = Field(..., min_length=3, max_length=100)
    title: str | None = Field(default=None, min_length=1, max_length=200)
    evidence: dict[str, Any] | None = None
    urgency: str | None = Field(default=None, pattern=URGENCY_PATTERN)
    tags: list[Tag] = Field(default_factory=list, max_length=10)
    reporter: ReporterInput | None = None
    metadata: dict[str, Any] | None = None
    valid_for: DurationText | None = None


class SolutionInput(_InputModel):
    description: str = Field(..., min_length=10, max_length=1000)
    format: SolutionFormat = SolutionFormat.MARKDOWN
    content: str | None = Field(default=None, min_length=1, max_length=10000)

    def to_domain(self) -> Solution:
        return Solution(description=self.description, format=self.format, content=self.content)


class ResourcesInput(_InputModel):
    needed: list[ResourceName] = Field(default_factory=list, max_length=20)
    offered: list[ResourceName] = Field(default_factory=list, max_length=20)

    def to_domain(self) -> Resources:
        return Resources(needed=tuple(self.needed), offered=tuple(self.offered))


class ProposerInput(_InputModel):
    did: NonEmptyStr | None = None
    type: ProposerType | None = None
    credentials: list[NonEmptyStr] = Field(default_factory=list)

    def to_domain(self) -> Proposer:
        return Proposer(did=self.did, type=self.type, credentials=tuple(self.credentials))


class ProposeInput(_InputModel):
    """Request body of POST /propose.

    Attributes:
        title: Proposal title (5-200 chars).
        in_response_to: Sense reference, "/sense/{id}".
        solution: Description (10-1000 chars), format and optional content.
        test: Success criterion (10-500 chars).
        sunset: Sunset as an ISO 8601 duration.
        resources: Optional needed/offered lists (up to 20 items each).
        proposer: Optional proposer description.
        metadata: Optional free-form metadata.
    """

    title: str = Field(..., min_length=5, max_length=200)
    in_response_to: str = Field(..., pattern=SENSE_URI_PATTERN)
    solution: SolutionInput
    test: str = Field(..., min_length=10, max_length=500)
    sunset: DurationText
    resources: ResourcesInput | None = None
    proposer: ProposerInput | None = None
    metadata: dict[str, Any] | None = None


class DecisionProcessInput(_InputModel):
    type: DecisionProcessType
    record: NonEmptyStr | None = None
    participants: list[NonEmptyStr] | None = None
    unanimous_consent: bool | None = None
    spiritual_validation: NonEmptyStr | None = None

    def to_domain(self) -> DecisionProcess:
        return DecisionProcess(
            type=self.type,
            record=self.record,
            participants=tuple(self.participants) if self.participants is not None else None,
            unanimous_consent=self.unanimous_consent,
            spiritual_validation=self.spiritual_validation,
        )


class ModificationsInput(_InputModel):
    sunset: DurationText | None = None
    test: str | None = Field(default=None, min_length=1, max_length=500)
    cultural_additions: str | None = Field(default=None, min_length=1, max_length=1000)

    def to_domain(self) -> Modifications:
        return Modifications(
            sunset=self.sunset, test=self.test, cultural_additions=self.cultural_additions
        )


class MonitoringInput(_InputModel):
    who: list[ResourceName] = Field(..., min_length=1)
    frequency: DurationText
    metrics: list[ResourceName] = Field(default_factory=list)
    reporting_format: str | None = Field(default=None, min_length=1, max_length=200)

    def to_domain(self) -> Monitoring:
        return Monitoring(
            who=tuple(self.who),
            frequency=self.frequency,
            metrics=tuple(self.metrics),
            reporting_format=self.reporting_format,
        )


class AdopterInput(_InputModel):
    did: NonEmptyStr | None = None
    type: AdopterType | None = None
    authority: NonEmptyStr | None = None

    def to_domain(self) -> Adopter:
        return Adopter(did=self.did, type=self.type, authority=self.authority)


class AdoptInput(_InputModel):
    """Request body of POST /adopt.

    Attributes:
        proposal_uri: Proposal reference, "/propose/{id}".
        decision_process: How the decision was made.
        modifications: Optional changes (sunset, test, cultural additions).
        monitoring: Optional monitors (at least one) and review frequency.
        adopter: Optional adopter description.
        metadata: Optional free-form metadata.
    """

    proposal_uri: str = Field(..., pattern=PROPOSAL_URI_PATTERN)
    decision_process: DecisionProcessInput
    modifications: ModificationsInput | None = None
    monitoring: MonitoringInput | None = None
    adopter: AdopterInput | None = None
    metadata: dict[str, Any] | None = None


GovernanceInput = Union[SenseInput, ProposeInput, AdoptInput]
