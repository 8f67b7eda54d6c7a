"""Rule-based conflict detection for new proposals.

Two rules, both read from the governance index:

- overlaps_resource_need (medium): another proposal answering the same
  sense needs a resource this proposal also needs.
- concurrent_trial_in_scope (low): another proposal in the same scope has
  an adoption whose trial overlaps this proposal's window
  [timestamp, sunset_date].

Conflicts are advisory. Nothing here blocks a proposal.
"""

from __future__ import annotations

from egp.application.dtos.governance_results import Conflict
from egp.application.ports.advisors import ConflictDetectorProtocol
from egp.application.ports.governance_index import GovernanceIndexProtocol
from egp.application.services.base import LoggingMixin
from egp.domain.models import Proposal, Sense, StoredObject

SEVERITY_MEDIUM = "medium"
SEVERITY_LOW = "low"


class RuleBasedConflictDetector(LoggingMixin, ConflictDetectorProtocol):
    """Detects resource and trial overlaps between proposals."""

    def __init__(self, governance_index: GovernanceIndexProtocol) -> None:
        """Initialize the detector.

        Args:
            governance_index: Read view over stored proposals and adoptions.
        """
        self._index = governance_index
        self._init_logger(component="advisor")

    async def detect(
        self, proposal: StoredObject[Proposal], sense: StoredObject[Sense]
    ) -> list[Conflict]:
        """Return potential conflicts for a stored proposal.

        Args:
            proposal: The newly stored proposal.
            sense: The sense it responds to.

        Returns:
            Conflicts, resource overlaps first, at most one per other proposal.
        """
        log = self._log_operation("detect_conflicts", proposal_id=proposal.id)
        conflicts: dict[str, Conflict] = {}

        needed = set(proposal.record.resources.needed) if proposal.record.resources else set()
        if needed:
            for other in await self._index.proposals_for_sense(sense.id):
                if other.id == proposal.id or other.record.resources is None:
                    continue
                shared = needed & set(other.record.resources.needed)
                if shared:
                    conflicts[other.id] = Conflict(
                        id=other.id,
                        reason="overlaps_resource_need",
                        severity=SEVERITY_MEDIUM,
                        details=f"Both proposals need {', '.join(sorted(shared))}",
                    )

        window_start = proposal.record.timestamp
        window_end = proposal.record.sunset_date
        scope = proposal.record.sense_context.scope
        for other in await self._index.list_proposals():
            if other.id == proposal.id or other.id in conflicts:
                continue
            if other.record.sense_context.scope != scope:
                continue
            for adoption in await self._index.adoptions_for_proposal(other.id):
                trial = adoption.record.trial_period
                if trial.starts < window_end and window_start < trial.ends:
                    conflicts[other.id] = Conflict(
                        id=other.id,
                        reason="concurrent_trial_in_scope",
                        severity=SEVERITY_LOW,
                        details=f"A trial of this proposal runs in {scope} during the same period",
                    )
                    break

        log.debug("conflicts_detected", count=len(conflicts))
        return list(conflicts.values())
