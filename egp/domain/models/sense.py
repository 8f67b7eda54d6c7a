"""Sense domain model.

A Sense is a reported systemic signal anchoring a governance scope and
issue. It is the root of every sense -> propose -> adopt chain and
references nothing.

A Sense may carry an optional validity window (expires_at). Proposals
against an expired Sense are rejected.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, ClassVar

from egp.domain.errors.reference import MalformedRecordError
from egp.domain.models.governance_object import (
    GovernanceObject,
    ObjectType,
    drop_none,
    frozen_json,
    read_field,
    read_instant,
)
from egp.domain.models.instant import ensure_utc, format_instant


class ReporterType(Enum):
    """Kind of entity reporting a signal."""

    HUMAN = "human"
    SENSOR = "sensor"
    AI = "ai"
    INSTITUTION = "institution"


@dataclass(frozen=True)
class Reporter:
    """Who reported the signal.

    Attributes:
        did: Decentralized identifier, if any.
        type: Reporter kind.
        location: Free-text location.
    """

    did: str | None = None
    type: ReporterType | None = None
    location: str | None = None

    def to_record(self) -> dict[str, Any]:
        return drop_none(
            {
                "did": self.did,
                "type": self.type.value if self.type else None,
                "location": self.location,
            }
        )

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> Reporter:
        reporter_type = record.get("type")
        return cls(
            did=record.get("did"),
            type=ReporterType(reporter_type) if reporter_type else None,
            location=record.get("location"),
        )


@dataclass(frozen=True, kw_only=True)
class Sense(GovernanceObject):
    """A reported systemic signal.

    Attributes:
        issue: Short machine-friendly issue label (e.g. "water_shortage").
        scope: Scope the signal applies to (e.g. "village:llajta").
        title: Optional human title.
        evidence: Optional free-form evidence object.
        urgency: Optional urgency, "1/5" to "5/5".
        tags: Classification tags.
        reporter: Optional reporter description.
        metadata: Optional free-form metadata.
        request_metadata: Transport details captured at intake.
        expires_at: End of the signal's validity window, if any.
    """

    OBJECT_TYPE: ClassVar[ObjectType] = ObjectType.SENSE

    issue: str
    scope: str
    title: str | None = None
    evidence: dict[str, Any] | None = None
    urgency: str | None = None
    tags: tuple[str, ...] = field(default_factory=tuple)
    reporter: Reporter | None = None
    metadata: dict[str, Any] | None = None
    request_metadata: dict[str, Any] | None = None
    expires_at: datetime | None = None

    def __post_init__(self) -> None:
        """Normalize collections and instants."""
        super().__post_init__()
        object.__setattr__(self, "tags", tuple(self.tags))
        object.__setattr__(self, "evidence", frozen_json(self.evidence))
        object.__setattr__(self, "metadata", frozen_json(self.metadata))
        object.__setattr__(self, "request_metadata", frozen_json(self.request_metadata))
        if self.expires_at is not None:
            object.__setattr__(self, "expires_at", ensure_utc(self.expires_at))

    @property
    def urgency_level(self) -> int | None:
        """Numeric urgency (1-5) or None."""
        if not self.urgency:
            return None
        return int(self.urgency.split("/", 1)[0])

    @property
    def scope_prefix(self) -> str:
        """Scope namespace, e.g. "village" for "village:llajta"."""
        return self.scope.split(":", 1)[0]

    def is_expired(self, now: datetime) -> bool:
        """True when the validity window exists and has lapsed."""
        return self.expires_at is not None and ensure_utc(now) > self.expires_at

    def to_record(self) -> dict[str, Any]:
        """Serialize to the stored JSON payload."""
        payload = {
            **self.envelope(),
            "issue": self.issue,
            "scope": self.scope,
            "title": self.title,
            "evidence": self.evidence,
            "urgency": self.urgency,
            "tags": list(self.tags),
            "reporter": self.reporter.to_record() if self.reporter else None,
            "metadata": self.metadata,
            "request_metadata": self.request_metadata,
            "expires_at": format_instant(self.expires_at) if self.expires_at else None,
        }
        return drop_none(payload)

    @classmethod
    def from_record(cls, record: Any) -> Sense:
        """Read a stored payload.

        Raises:
            MalformedRecordError: If the payload is not a sense record.
        """
        mapping, common = cls.read_envelope(record)
        kind = cls.OBJECT_TYPE.value
        try:
            reporter = mapping.get("reporter")
            return cls(
                **common,
                issue=str(read_field(mapping, "issue", kind)),
                scope=str(read_field(mapping, "scope", kind)),
                title=mapping.get("title"),
                evidence=mapping.get("evidence"),
                urgency=mapping.get("urgency"),
                tags=tuple(mapping.get("tags") or ()),
                reporter=Reporter.from_record(reporter) if reporter else None,
                metadata=mapping.get("metadata"),
                request_metadata=mapping.get("request_metadata"),
                expires_at=(
                    read_instant(mapping, "expires_at", kind)
                    if mapping.get("expires_at")
                    else None
                ),
            )
        except (TypeError, ValueError) as exc:
            raise MalformedRecordError(kind, str(exc)) from exc
