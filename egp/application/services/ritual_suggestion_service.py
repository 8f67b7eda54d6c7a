"""Scope and urgency based ritual suggestions for proposals."""

from __future__ import annotations

from egp.application.ports.advisors import RitualSuggesterProtocol
from egp.domain.models import Proposal, Sense

CRISIS_URGENCY = "5/5"


class ScopeRitualSuggester(RitualSuggesterProtocol):
    """Maps the sense's scope, tags and urgency to governance protocols.

    Village scopes get a council consent process, with elder and water
    ceremonies when the sense is tagged accordingly. Proposals that need
    resources get a resource-sharing ritual. Crisis urgency (5/5) gets
    rapid protocols; everything else gets deliberative ones.
    """

    async def suggest(self, proposal: Proposal, sense: Sense) -> dict[str, str]:
        rituals: dict[str, str] = {}

        if "village:" in sense.scope:
            rituals["consent_process"] = "/rituals/village_council"
            if "indigenous_knowledge" in sense.tags:
                rituals["elder_blessing"] = "/rituals/elder_council_blessing"
                rituals["spiritual_validation"] = "/ceremonies/water_blessing"
            if "water" in sense.tags:
                rituals["offering_required"] = "traditional_water_ceremony"
                rituals["blessing_required"] = "water_spirit_consultation"

        if proposal.resources and proposal.resources.needed:
            rituals["resource_commitment_ceremony"] = "/rituals/resource_sharing"

        if sense.urgency == CRISIS_URGENCY:
            rituals["emergency_adoption"] = "/protocols/crisis_decision"
            rituals["rapid_consent"] = "/rituals/emergency_council"
        else:
            rituals["deliberative_process"] = "/protocols/consensus_building"
            rituals["community_dialogue"] = "/rituals/talking_circle"

        return rituals
