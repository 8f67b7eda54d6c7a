"""Review schedules and revocation conditions for adoptions.

Both functions are pure: no clock, no storage, deterministic output for
identical input.

generate_revocation_conditions() is a rule-based heuristic over the
free-text success criterion. It uses case-sensitive substring matching
and a single percentage regex; it does not interpret language.
"""

from __future__ import annotations

import re
from datetime import datetime

from egp.application.dtos.governance_results import RevocationCondition
from egp.domain.models import Duration, Monitoring, add_to
from egp.domain.models.instant import ensure_utc

DEFAULT_MAX_REVIEWS = 1000
WATER_THRESHOLD_BUFFER = 10
DEFAULT_CONFLICT_RECORDER = "community_council"
DEFAULT_YIELD_RECORDER = "agricultural_monitor"

_PERCENT_PATTERN = re.compile(r"(\d+)%")


def generate_review_schedule(
    start: datetime,
    end: datetime,
    frequency: str | None,
    max_reviews: int | None = None,
) -> list[datetime]:
    """Generate review instants between start and end.

    Starting from start, the frequency is added repeatedly; every
    resulting instant strictly before end is emitted.

    Args:
        start: Trial start.
        end: Trial end (exclusive).
        frequency: Review cadence as an ISO 8601 duration.
        max_reviews: Upper bound on the number of reviews
            (DEFAULT_MAX_REVIEWS when None).

    Returns:
        Strictly increasing instants d with start <= d < end. Empty when
        the frequency is missing, unparsable or zero.
    """
    duration = Duration.try_parse(frequency) if frequency else None
    if duration is None or duration.is_zero:
        return []

    limit = DEFAULT_MAX_REVIEWS if max_reviews is None else max_reviews
    end = ensure_utc(end)
    schedule: list[datetime] = []
    current = ensure_utc(start)
    while len(schedule) < limit:
        try:
            current = add_to(current, duration)
        except OverflowError:
            break
        if current >= end:
            break
        schedule.append(current)
    return schedule


def generate_revocation_conditions(
    test_criteria: str,
    monitoring: Monitoring | None = None,
) -> list[RevocationCondition]:
    """Derive revocation conditions from a success criterion.

    Rules, in order:
        - "conflict" present: conflict index review, recorded by the
          first monitor (or the community council), weekly.
        - "water" and a percentage present: efficiency threshold at the
          first percentage minus 10 points, escalated to council.
        - "harvest" or "yield" present: yield shortfall auto-revert,
          recorded by the first monitor whose id contains "farmer".
        - Always last: critical failure halts the trial.

    Args:
        test_criteria: The success criterion in force.
        monitoring: The adoption's monitoring arrangement, if any.

    Returns:
        Conditions in rule order, ending with the critical failure rule.
    """
    monitors = monitoring.who if monitoring else ()
    conditions: list[RevocationCondition] = []

    if "conflict" in test_criteria:
        conditions.append(
            RevocationCondition(
                condition="community_conflict_index > 30%",
                action="trigger_review",
                recorded_by=monitors[0] if monitors else DEFAULT_CONFLICT_RECORDER,
                check_frequency="P1W",
            )
        )

    if "water" in test_criteria and "%" in test_criteria:
        match = _PERCENT_PATTERN.search(test_criteria)
        if match:
            threshold = int(match.group(1)) - WATER_THRESHOLD_BUFFER
            conditions.append(
                RevocationCondition(
                    condition=f"water_efficiency < {threshold}%",
                    action="escalate_to_council",
                    recorded_by="sensor:water_monitoring",
                    check_frequency="P3D",
                )
            )

    if "harvest" in test_criteria or "yield" in test_criteria:
        farmer = next((who for who in monitors if "farmer" in who), None)
        conditions.append(
            RevocationCondition(
                condition="crop_yield < 50% of_target",
                action="auto_revert",
                recorded_by=farmer or DEFAULT_YIELD_RECORDER,
                check_frequency="P1M",
            )
        )

    conditions.append(
        RevocationCondition(
            condition="critical_failure_reported",
            action="immediate_halt",
            recorded_by="any_monitor",
            description="Emergency stop if any monitor reports critical failure",
        )
    )
    return conditions
