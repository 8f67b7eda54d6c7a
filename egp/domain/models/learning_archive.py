"""Learning archive domain model.

Each adoption gets an archive skeleton where monitors and the community
accumulate decisions, monitoring data, stories and lessons over the
trial. The archive is created after the adoption is stored, so it
refers to the adoption by id.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar

from egp.domain.models.governance_object import GovernanceObject, ObjectType

ARCHIVE_STRUCTURE: dict[str, str] = {
    "decisions": "/decisions/",
    "monitoring_data": "/monitoring/",
    "community_stories": "/stories/",
    "lessons_learned": "/lessons/",
    "adaptations": "/adaptations/",
    "final_report": "/final_report.md",
}

DEFAULT_ADMIN_ROLE = "community_council"


@dataclass(frozen=True, kw_only=True)
class LearningArchive(GovernanceObject):
    """Archive skeleton for an adoption.

    Attributes:
        adoption_id: Content id of the adoption.
        proposal_id: Content id of the adopted proposal.
        sense_id: Content id of the originating sense.
        contributors: Monitors allowed to contribute.
        admin_roles: Roles allowed to administer the archive.
    """

    OBJECT_TYPE: ClassVar[ObjectType] = ObjectType.LEARNING_ARCHIVE

    adoption_id: str
    proposal_id: str
    sense_id: str
    contributors: tuple[str, ...] = ()
    admin_roles: tuple[str, ...] = (DEFAULT_ADMIN_ROLE,)

    def to_record(self) -> dict[str, Any]:
        """Serialize to the stored JSON payload."""
        return {
            **self.envelope(),
            "adoption_id": self.adoption_id,
            "proposal_id": self.proposal_id,
            "sense_id": self.sense_id,
            "created": self.envelope()["timestamp"],
            "structure": dict(ARCHIVE_STRUCTURE),
            "contributors": list(self.contributors),
            "access_control": {
                "public_read": True,
                "contribute_roles": list(self.contributors),
                "admin_roles": list(self.admin_roles),
            },
        }
