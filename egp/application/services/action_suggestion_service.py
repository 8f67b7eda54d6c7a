"""Suggested next actions after a signal is reported.

Each action is a relative reference a client can navigate to: a
pre-filled proposal form, people and knowledge matching the tags,
coordination with related signals and, for crisis urgency, emergency
routes.
"""

from __future__ import annotations

from collections.abc import Sequence
from urllib.parse import urlencode

from egp.application.dtos.governance_results import Echo
from egp.application.ports.advisors import ActionSuggesterProtocol
from egp.domain.models import Sense

CRISIS_URGENCY = "5/5"


def _route(path: str, **params: str) -> str:
    if not params:
        return path
    return f"{path}?{urlencode(params, safe=':,/')}"


class RuleBasedActionSuggester(ActionSuggesterProtocol):
    """Tag, relation and urgency driven action suggestions."""

    async def suggest(self, sense: Sense, related: Sequence[Echo]) -> dict[str, str]:
        actions = {
            "propose_template": _route("/propose", from_sense=sense.issue, scope=sense.scope),
        }

        if "water" in sense.tags:
            actions["local_water_experts"] = _route(
                "/people", skills="water_management", near=sense.scope
            )
            actions["traditional_knowledge"] = _route(
                "/knowledge", topic="water_conservation", culture="local"
            )
        if "indigenous_knowledge" in sense.tags:
            actions["elder_council"] = _route("/councils", type="traditional", scope=sense.scope)
            actions["traditional_solutions"] = _route(
                "/solutions", traditional="true", issue=sense.issue
            )
        if "climate_adaptation" in sense.tags:
            params = {"topic": "adaptation"}
            if sense.urgency:
                params["urgency"] = sense.urgency
            actions["climate_resources"] = _route("/resources", **params)
            actions["similar_cases"] = _route("/cases", climate_related="true", resolved="true")

        if related:
            actions["coordinate_with"] = _route(
                "/coordination", related_signals=",".join(echo.id for echo in related)
            )
            actions["regional_response"] = _route(
                "/regional", issue_cluster=sense.issue, scope_pattern=sense.scope_prefix
            )

        if sense.urgency == CRISIS_URGENCY:
            actions["emergency_protocols"] = _route(
                "/emergency", issue=sense.issue, scope=sense.scope
            )
            actions["rapid_response_teams"] = _route("/teams", type="emergency", available="true")

        return actions
