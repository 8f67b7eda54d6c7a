"""In-memory governance index.

Keeps every sense, proposal and adoption this process has written,
plus the proposal -> sense and adoption -> proposal links the advisors
query. The index is per process and rebuilt empty on restart.
"""

from __future__ import annotations

import asyncio
from collections import defaultdict

from egp.application.ports.governance_index import GovernanceIndexProtocol
from egp.domain.models import (
    Adoption,
    ObjectType,
    Proposal,
    Sense,
    StoredObject,
    parse_object_uri,
)


class InMemoryGovernanceIndex(GovernanceIndexProtocol):
    """In-memory implementation of GovernanceIndexProtocol."""

    def __init__(self) -> None:
        self._kinds: dict[str, ObjectType] = {}
        self._senses: dict[str, StoredObject[Sense]] = {}
        self._proposals: dict[str, StoredObject[Proposal]] = {}
        self._adoptions: dict[str, StoredObject[Adoption]] = {}
        self._proposals_by_sense: dict[str, list[str]] = defaultdict(list)
        self._adoptions_by_proposal: dict[str, list[str]] = defaultdict(list)
        self._lock = asyncio.Lock()

    async def record(self, stored: StoredObject) -> None:
        record = stored.record
        async with self._lock:
            if stored.id in self._kinds:
                return
            if isinstance(record, Sense):
                self._senses[stored.id] = stored
            elif isinstance(record, Proposal):
                self._proposals[stored.id] = stored
                self._proposals_by_sense[record.sense_context.id].append(stored.id)
            elif isinstance(record, Adoption):
                self._adoptions[stored.id] = stored
                proposal_id = parse_object_uri(record.proposal_uri, ObjectType.PROPOSE)
                self._adoptions_by_proposal[proposal_id].append(stored.id)
            else:
                raise TypeError(f"cannot index {record.type.value} records")
            self._kinds[stored.id] = record.type

    async def get_kind(self, object_id: str) -> ObjectType | None:
        return self._kinds.get(object_id)

    async def list_senses(self) -> list[StoredObject[Sense]]:
        return list(self._senses.values())

    async def list_proposals(self) -> list[StoredObject[Proposal]]:
        return list(self._proposals.values())

    async def proposals_for_sense(self, sense_id: str) -> list[StoredObject[Proposal]]:
        return [self._proposals[pid] for pid in self._proposals_by_sense.get(sense_id, [])]

    async def adoptions_for_proposal(self, proposal_id: str) -> list[StoredObject[Adoption]]:
        return [self._adoptions[aid] for aid in self._adoptions_by_proposal.get(proposal_id, [])]

    def clear(self) -> None:
        """Forget everything (for tests)."""
        self._kinds.clear()
        self._senses.clear()
        self._proposals.clear()
        self._adoptions.clear()
        self._proposals_by_sense.clear()
        self._adoptions_by_proposal.clear()
