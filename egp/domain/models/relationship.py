"""Relationship domain model.

Edges between governance objects are themselves content-addressed
records. The graph is append-only: revising a record means writing a new
record plus a new edge, never editing an existing one. Links use the
IPLD shape {"/": "<content id>"}.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar

from egp.domain.errors.reference import MalformedRecordError
from egp.domain.models.governance_object import GovernanceObject, ObjectType, read_field


class RelationshipType(Enum):
    """Kind of edge.

    Types:
        RESPONDS_TO: Proposal -> Sense.
        ADOPTS: Adoption -> Proposal.
        MODIFIES: Adoption -> Proposal, when the adoption altered it.
    """

    RESPONDS_TO = "responds_to"
    ADOPTS = "adopts"
    MODIFIES = "modifies"


def _link_target(link: Any) -> str:
    if isinstance(link, dict) and isinstance(link.get("/"), str):
        return link["/"]
    raise ValueError(f"expected an IPLD link, got {link!r}")


@dataclass(frozen=True, kw_only=True)
class Relationship(GovernanceObject):
    """A typed directed edge between two stored objects.

    Attributes:
        from_id: Content id of the source object.
        to_id: Content id of the target object.
        relationship_type: Edge kind.
    """

    OBJECT_TYPE: ClassVar[ObjectType] = ObjectType.RELATIONSHIP

    from_id: str
    to_id: str
    relationship_type: RelationshipType

    def to_record(self) -> dict[str, Any]:
        """Serialize to the stored JSON payload."""
        return {
            **self.envelope(),
            "from": {"/": self.from_id},
            "to": {"/": self.to_id},
            "relationshipType": self.relationship_type.value,
        }

    @classmethod
    def from_record(cls, record: Any) -> Relationship:
        """Read a stored payload.

        Raises:
            MalformedRecordError: If the payload is not a relationship record.
        """
        mapping, common = cls.read_envelope(record)
        kind = cls.OBJECT_TYPE.value
        try:
            return cls(
                **common,
                from_id=_link_target(read_field(mapping, "from", kind)),
                to_id=_link_target(read_field(mapping, "to", kind)),
                relationship_type=RelationshipType(
                    read_field(mapping, "relationshipType", kind)
                ),
            )
        except ValueError as exc:
            raise MalformedRecordError(kind, str(exc)) from exc
