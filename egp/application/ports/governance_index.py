"""Governance index port.

Read-side view over the records this node has written. The heuristic
advisors query it for prior senses and proposals; the reader operation
uses it to learn whether a proposal has been adopted. The content store
alone cannot answer these questions since it only resolves ids.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from egp.domain.models import Adoption, ObjectType, Proposal, Sense, StoredObject


class GovernanceIndexProtocol(Protocol):
    """Protocol for the governance record index."""

    @abstractmethod
    async def record(self, stored: StoredObject) -> None:
        """Index a freshly persisted sense, proposal or adoption."""
        ...

    @abstractmethod
    async def get_kind(self, object_id: str) -> ObjectType | None:
        """Return the kind of an indexed object, or None if unknown."""
        ...

    @abstractmethod
    async def list_senses(self) -> list[StoredObject[Sense]]:
        """Return every indexed sense, oldest first."""
        ...

    @abstractmethod
    async def list_proposals(self) -> list[StoredObject[Proposal]]:
        """Return every indexed proposal, oldest first."""
        ...

    @abstractmethod
    async def proposals_for_sense(self, sense_id: str) -> list[StoredObject[Proposal]]:
        """Return proposals responding to a sense, oldest first."""
        ...

    @abstractmethod
    async def adoptions_for_proposal(self, proposal_id: str) -> list[StoredObject[Adoption]]:
        """Return adoptions of a proposal, oldest first."""
        ...
