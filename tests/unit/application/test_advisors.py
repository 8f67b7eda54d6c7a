"""Unit tests for the heuristic advisors."""

from datetime import datetime, timedelta, timezone

import pytest

from egp.application.dtos import Echo
from egp.application.services.action_suggestion_service import RuleBasedActionSuggester
from egp.application.services.conflict_detection_service import RuleBasedConflictDetector
from egp.application.services.ritual_suggestion_service import ScopeRitualSuggester
from egp.application.services.similarity_service import (
    OverlapSimilarityFinder,
    jaccard,
    word_trigrams,
)
from egp.domain.models import (
    Adoption,
    DecisionProcess,
    DecisionProcessType,
    ObjectType,
    Proposal,
    ProposalContext,
    Resources,
    Sense,
    SenseContext,
    Solution,
    StoredObject,
    TrialPeriod,
)
from egp.infrastructure.stubs import InMemoryGovernanceIndex

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def sense(
    object_id: str,
    *,
    issue: str = "water_shortage",
    scope: str = "village:llajta",
    tags: tuple[str, ...] = (),
    urgency: str | None = None,
) -> StoredObject[Sense]:
    return StoredObject(
        object_id, Sense(timestamp=NOW, issue=issue, scope=scope, tags=tags, urgency=urgency)
    )


def proposal(
    object_id: str,
    sense_id: str = "bsense1",
    *,
    scope: str = "village:llajta",
    needed: tuple[str, ...] = (),
    offered: tuple[str, ...] = (),
    description: str = "Farmers take turns at night",
) -> StoredObject[Proposal]:
    return StoredObject(
        object_id,
        Proposal(
            timestamp=NOW,
            title="A proposal",
            in_response_to=f"/sense/{sense_id}",
            solution=Solution(description=description),
            test="Conflict drops 20% in 2mo",
            sunset="P6M",
            sunset_date=NOW + timedelta(days=180),
            sense_context=SenseContext(id=sense_id, issue="water_shortage", scope=scope),
            resources=Resources(needed=needed, offered=offered),
        ),
    )


def adoption(object_id: str, proposal_id: str, starts: datetime, ends: datetime) -> StoredObject:
    return StoredObject(
        object_id,
        Adoption(
            timestamp=starts,
            proposal_uri=f"/propose/{proposal_id}",
            decision_process=DecisionProcess(type=DecisionProcessType.CONSENT),
            trial_period=TrialPeriod(starts=starts, ends=ends, original_sunset=ends),
            proposal_context=ProposalContext(
                id=proposal_id, title="t", sense_id="bsense1", original_test="x"
            ),
        ),
    )


@pytest.fixture
def index() -> InMemoryGovernanceIndex:
    return InMemoryGovernanceIndex()


class TestConflictDetector:
    """Tests for RuleBasedConflictDetector."""

    @pytest.mark.asyncio
    async def test_shared_resource_need_is_medium(self, index: InMemoryGovernanceIndex) -> None:
        s = sense("bsense1")
        other = proposal("bprop1", needed=("jugs", "volunteers"))
        new = proposal("bprop2", needed=("volunteers", "seeds"))
        await index.record(other)
        await index.record(new)

        conflicts = await RuleBasedConflictDetector(index).detect(new, s)

        assert len(conflicts) == 1
        assert conflicts[0].id == "bprop1"
        assert conflicts[0].reason == "overlaps_resource_need"
        assert conflicts[0].severity == "medium"
        assert "volunteers" in conflicts[0].details

    @pytest.mark.asyncio
    async def test_other_sense_needs_do_not_conflict(self, index: InMemoryGovernanceIndex) -> None:
        await index.record(proposal("bprop1", sense_id="bsense9", needed=("jugs",)))
        new = proposal("bprop2", needed=("jugs",))

        assert await RuleBasedConflictDetector(index).detect(new, sense("bsense1")) == []

    @pytest.mark.asyncio
    async def test_concurrent_trial_in_scope_is_low(self, index: InMemoryGovernanceIndex) -> None:
        other = proposal("bprop1", sense_id="bsense9")
        await index.record(other)
        await index.record(adoption("badopt1", "bprop1", NOW, NOW + timedelta(days=30)))
        new = proposal("bprop2")

        conflicts = await RuleBasedConflictDetector(index).detect(new, sense("bsense1"))

        assert [(c.id, c.reason, c.severity) for c in conflicts] == [
            ("bprop1", "concurrent_trial_in_scope", "low")
        ]

    @pytest.mark.asyncio
    async def test_finished_trial_does_not_conflict(self, index: InMemoryGovernanceIndex) -> None:
        await index.record(proposal("bprop1", sense_id="bsense9"))
        await index.record(
            adoption("badopt1", "bprop1", NOW - timedelta(days=60), NOW - timedelta(days=1))
        )

        assert await RuleBasedConflictDetector(index).detect(proposal("bprop2"), sense("bsense1")) == []

    @pytest.mark.asyncio
    async def test_other_scope_trial_does_not_conflict(self, index: InMemoryGovernanceIndex) -> None:
        await index.record(proposal("bprop1", sense_id="bsense9", scope="city:lima"))
        await index.record(adoption("badopt1", "bprop1", NOW, NOW + timedelta(days=30)))

        assert await RuleBasedConflictDetector(index).detect(proposal("bprop2"), sense("bsense1")) == []


class TestSimilarityFinder:
    """Tests for OverlapSimilarityFinder."""

    def test_jaccard(self) -> None:
        assert jaccard({"a", "b"}, {"b", "c"}) == pytest.approx(1 / 3)
        assert jaccard([], []) == 0.0

    def test_word_trigrams(self) -> None:
        assert word_trigrams("Take turns at night") == {
            ("take", "turns", "at"),
            ("turns", "at", "night"),
        }
        assert word_trigrams("two words") == {("two", "words")}
        assert word_trigrams("") == set()

    def test_sense_score_components(self, index: InMemoryGovernanceIndex) -> None:
        finder = OverlapSimilarityFinder(index)
        a = sense("b1", tags=("water", "climate")).record
        b = sense("b2", tags=("water", "climate")).record
        score, reason = finder.score_senses(a, b)
        assert score == pytest.approx(1.0)
        assert reason == "shared_tags+same_scope+same_issue"

    @pytest.mark.asyncio
    async def test_related_senses_ranked_and_excludes_self(
        self, index: InMemoryGovernanceIndex
    ) -> None:
        new = sense("bnew", tags=("water",))
        close = sense("bclose", tags=("water",))
        partial = sense("bpartial", issue="drought", tags=())
        unrelated = sense("bfar", issue="noise", scope="city:lima")
        for stored in (new, close, partial, unrelated):
            await index.record(stored)

        echoes = await OverlapSimilarityFinder(index, threshold=0.3).related_senses(new)

        assert [e.id for e in echoes] == ["bclose", "bpartial"]
        assert echoes[0].kind == ObjectType.SENSE
        assert echoes[0].similarity > echoes[1].similarity
        assert echoes[0].uri == "/sense/bclose"

    @pytest.mark.asyncio
    async def test_similar_proposals_by_offered_resources(
        self, index: InMemoryGovernanceIndex
    ) -> None:
        new = proposal("bnew", offered=("land_access", "elders_council"), description="alpha beta gamma")
        other = proposal("bold", offered=("land_access",), description="delta epsilon zeta")
        await index.record(other)
        await index.record(new)

        echoes = await OverlapSimilarityFinder(index).similar_proposals(new)

        assert len(echoes) == 1
        assert echoes[0].id == "bold"
        assert echoes[0].reason == "shared_offered_resources"
        assert echoes[0].similarity == pytest.approx(0.5)

    @pytest.mark.asyncio
    async def test_similar_proposals_by_solution_text(
        self, index: InMemoryGovernanceIndex
    ) -> None:
        text = "Farmers take turns at night to reduce evaporation"
        new = proposal("bnew", description=text)
        other = proposal("bold", description=text + " losses")
        await index.record(other)

        echoes = await OverlapSimilarityFinder(index).similar_proposals(new)

        assert [e.reason for e in echoes] == ["similar_solution_text"]

    @pytest.mark.asyncio
    async def test_below_threshold_is_dropped(self, index: InMemoryGovernanceIndex) -> None:
        await index.record(proposal("bold", offered=("a", "b", "c", "d"), description="one two three"))
        new = proposal("bnew", offered=("a",), description="four five six")

        assert await OverlapSimilarityFinder(index, threshold=0.3).similar_proposals(new) == []


class TestRitualSuggester:
    """Tests for ScopeRitualSuggester."""

    @pytest.mark.asyncio
    async def test_village_water_indigenous(self) -> None:
        s = sense("b1", tags=("water", "indigenous_knowledge")).record
        p = proposal("b2", needed=("jugs",)).record

        rituals = await ScopeRitualSuggester().suggest(p, s)

        assert rituals["consent_process"] == "/rituals/village_council"
        assert rituals["elder_blessing"] == "/rituals/elder_council_blessing"
        assert rituals["offering_required"] == "traditional_water_ceremony"
        assert rituals["resource_commitment_ceremony"] == "/rituals/resource_sharing"
        assert rituals["deliberative_process"] == "/protocols/consensus_building"
        assert "emergency_adoption" not in rituals

    @pytest.mark.asyncio
    async def test_crisis_urgency_gets_rapid_protocols(self) -> None:
        s = sense("b1", scope="city:lima", urgency="5/5").record
        rituals = await ScopeRitualSuggester().suggest(proposal("b2").record, s)

        assert rituals == {
            "emergency_adoption": "/protocols/crisis_decision",
            "rapid_consent": "/rituals/emergency_council",
        }


class TestActionSuggester:
    """Tests for RuleBasedActionSuggester."""

    @pytest.mark.asyncio
    async def test_always_offers_propose_template(self) -> None:
        s = sense("b1", scope="city:lima").record
        actions = await RuleBasedActionSuggester().suggest(s, [])
        assert actions == {
            "propose_template": "/propose?from_sense=water_shortage&scope=city:lima"
        }

    @pytest.mark.asyncio
    async def test_tags_related_and_crisis(self) -> None:
        s = sense("b1", tags=("water", "indigenous_knowledge"), urgency="5/5").record
        related = [Echo("babc", ObjectType.SENSE, 0.8, "shared_tags")]

        actions = await RuleBasedActionSuggester().suggest(s, related)

        assert actions["local_water_experts"] == (
            "/people?skills=water_management&near=village:llajta"
        )
        assert actions["elder_council"] == "/councils?type=traditional&scope=village:llajta"
        assert actions["coordinate_with"] == "/coordination?related_signals=babc"
        assert actions["regional_response"] == (
            "/regional?issue_cluster=water_shortage&scope_pattern=village"
        )
        assert "emergency_protocols" in actions
        assert actions["rapid_response_teams"] == "/teams?type=emergency&available=true"
