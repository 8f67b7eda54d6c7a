"""Overlap-based similarity ("echoes").

Scores are Jaccard overlaps of plain feature sets, not semantics:

- Senses: shared tags, same scope namespace, same issue label.
- Proposals: shared offered resources, shared solution-description word
  trigrams.

Only matches at or above the configured threshold are returned, most
similar first.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

from egp.application.dtos.governance_results import Echo
from egp.application.ports.advisors import SimilarityFinderProtocol
from egp.application.ports.governance_index import GovernanceIndexProtocol
from egp.application.services.base import LoggingMixin
from egp.domain.models import ObjectType, Proposal, Sense, StoredObject

DEFAULT_SIMILARITY_THRESHOLD = 0.3

TAG_WEIGHT = 0.5
SCOPE_WEIGHT = 0.3
ISSUE_WEIGHT = 0.2

_WORD_PATTERN = re.compile(r"[a-z0-9]+")


def jaccard(left: Iterable[object], right: Iterable[object]) -> float:
    """Jaccard index of two collections; 0.0 when both are empty."""
    a, b = set(left), set(right)
    union = a | b
    if not union:
        return 0.0
    return len(a & b) / len(union)


def word_trigrams(text: str) -> set[tuple[str, ...]]:
    """Lowercased word trigrams. Texts under three words yield one gram."""
    words = _WORD_PATTERN.findall(text.lower())
    if len(words) < 3:
        return {tuple(words)} if words else set()
    return {tuple(words[i : i + 3]) for i in range(len(words) - 2)}


def _ranked(echoes: list[Echo]) -> list[Echo]:
    return sorted(echoes, key=lambda echo: (-echo.similarity, echo.id))


class OverlapSimilarityFinder(LoggingMixin, SimilarityFinderProtocol):
    """Finds related senses and similar proposals in the governance index."""

    def __init__(
        self,
        governance_index: GovernanceIndexProtocol,
        threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
    ) -> None:
        """Initialize the finder.

        Args:
            governance_index: Read view over stored records.
            threshold: Minimum score for a match to be returned.
        """
        self._index = governance_index
        self._threshold = threshold
        self._init_logger(component="advisor")

    def score_senses(self, new: Sense, other: Sense) -> tuple[float, str]:
        """Score two senses and name the features that matched."""
        reasons = []
        score = 0.0
        tag_overlap = jaccard(new.tags, other.tags)
        if tag_overlap:
            score += TAG_WEIGHT * tag_overlap
            reasons.append("shared_tags")
        if new.scope_prefix == other.scope_prefix:
            score += SCOPE_WEIGHT
            reasons.append("same_scope")
        if new.issue == other.issue:
            score += ISSUE_WEIGHT
            reasons.append("same_issue")
        return score, "+".join(reasons)

    def score_proposals(self, new: Proposal, other: Proposal) -> tuple[float, str]:
        """Score two proposals and name the stronger matching feature."""
        offered_new = new.resources.offered if new.resources else ()
        offered_other = other.resources.offered if other.resources else ()
        resource_score = jaccard(offered_new, offered_other)
        text_score = jaccard(
            word_trigrams(new.solution.description),
            word_trigrams(other.solution.description),
        )
        if resource_score >= text_score:
            return resource_score, "shared_offered_resources"
        return text_score, "similar_solution_text"

    async def related_senses(self, sense: StoredObject[Sense]) -> list[Echo]:
        """Return prior senses related to a new sense."""
        echoes = []
        for other in await self._index.list_senses():
            if other.id == sense.id:
                continue
            score, reason = self.score_senses(sense.record, other.record)
            if score >= self._threshold:
                echoes.append(Echo(other.id, ObjectType.SENSE, round(score, 4), reason))
        self._log_operation("related_senses", sense_id=sense.id).debug(
            "related_senses_found", count=len(echoes)
        )
        return _ranked(echoes)

    async def similar_proposals(self, proposal: StoredObject[Proposal]) -> list[Echo]:
        """Return prior proposals similar to a new proposal."""
        echoes = []
        for other in await self._index.list_proposals():
            if other.id == proposal.id:
                continue
            score, reason = self.score_proposals(proposal.record, other.record)
            if score >= self._threshold:
                echoes.append(Echo(other.id, ObjectType.PROPOSE, round(score, 4), reason))
        self._log_operation("similar_proposals", proposal_id=proposal.id).debug(
            "similar_proposals_found", count=len(echoes)
        )
        return _ranked(echoes)
