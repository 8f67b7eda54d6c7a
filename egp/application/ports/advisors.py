"""Heuristic advisor ports.

Advisors enrich lifecycle responses with context: related signals,
similar proposals, potential conflicts, suggested rituals and actions.
They are best-effort. The lifecycle service runs each call under a time
bound and replaces a failing advisor's output with an empty result, so
an implementation may raise without breaking the request.

The default implementations are rule-based and read from the
GovernanceIndexProtocol. An index-backed or semantic implementation can
be swapped in through these protocols.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from collections.abc import Sequence

    from egp.application.dtos.governance_results import Conflict, Echo
    from egp.domain.models import Proposal, Sense, StoredObject


class ConflictDetectorProtocol(Protocol):
    """Flags proposals that compete with a new proposal."""

    @abstractmethod
    async def detect(
        self, proposal: StoredObject[Proposal], sense: StoredObject[Sense]
    ) -> list[Conflict]:
        """Return potential conflicts for a stored proposal."""
        ...


class SimilarityFinderProtocol(Protocol):
    """Finds prior objects similar to a new one ("echoes")."""

    @abstractmethod
    async def related_senses(self, sense: StoredObject[Sense]) -> list[Echo]:
        """Return senses related to a new sense, most similar first."""
        ...

    @abstractmethod
    async def similar_proposals(self, proposal: StoredObject[Proposal]) -> list[Echo]:
        """Return proposals similar to a new proposal, most similar first."""
        ...


class RitualSuggesterProtocol(Protocol):
    """Suggests governance protocols for adopting a proposal."""

    @abstractmethod
    async def suggest(self, proposal: Proposal, sense: Sense) -> dict[str, str]:
        """Return a mapping of ritual name to protocol reference."""
        ...


class ActionSuggesterProtocol(Protocol):
    """Suggests next actions after a signal is reported."""

    @abstractmethod
    async def suggest(self, sense: Sense, related: Sequence[Echo]) -> dict[str, str]:
        """Return a mapping of action name to a navigable reference."""
        ...
