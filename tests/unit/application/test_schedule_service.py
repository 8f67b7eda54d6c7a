"""Unit tests for review schedules and revocation conditions."""

from datetime import datetime, timedelta, timezone

import pytest

from egp.application.services.schedule_service import (
    generate_review_schedule,
    generate_revocation_conditions,
)
from egp.domain.models import Monitoring

START = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)
OVERSIZED_FREQUENCY = "P" + "9" * 5000 + "D"


class TestReviewSchedule:
    """Tests for generate_review_schedule()."""

    def test_biweekly_over_six_months(self) -> None:
        end = START + timedelta(days=184)
        schedule = generate_review_schedule(START, end, "P2W")
        assert schedule[0] == START + timedelta(weeks=2)
        assert len(schedule) == 13
        assert schedule[-1] == START + timedelta(weeks=26)

    @pytest.mark.parametrize("frequency", ["P1W", "P3D", "P1M", "PT12H", "P1M2D"])
    def test_dates_within_bounds_and_increasing(self, frequency: str) -> None:
        end = START + timedelta(days=120)
        schedule = generate_review_schedule(START, end, frequency)
        assert schedule
        assert all(START <= d < end for d in schedule)
        assert all(a < b for a, b in zip(schedule, schedule[1:]))

    def test_end_is_exclusive(self) -> None:
        end = START + timedelta(weeks=4)
        assert generate_review_schedule(START, end, "P2W") == [START + timedelta(weeks=2)]

    def test_frequency_longer_than_trial(self) -> None:
        assert generate_review_schedule(START, START + timedelta(days=5), "P1W") == []

    @pytest.mark.parametrize(
        "frequency", [None, "", "P", "P0D", "weekly", "P\u0663W", OVERSIZED_FREQUENCY]
    )
    def test_unusable_frequency_yields_empty(self, frequency: str | None) -> None:
        assert generate_review_schedule(START, START + timedelta(days=60), frequency) == []

    def test_monthly_uses_cumulative_rollover(self) -> None:
        """Test months are added step by step from the previous review."""
        start = datetime(2026, 1, 31, tzinfo=timezone.utc)
        schedule = generate_review_schedule(start, start + timedelta(days=70), "P1M")
        assert schedule == [
            datetime(2026, 3, 3, tzinfo=timezone.utc),
            datetime(2026, 4, 3, tzinfo=timezone.utc),
        ]

    def test_max_reviews_caps_output(self) -> None:
        schedule = generate_review_schedule(START, START + timedelta(days=365), "P1D", max_reviews=5)
        assert len(schedule) == 5


class TestRevocationConditions:
    """Tests for generate_revocation_conditions()."""

    def test_critical_failure_always_last_and_unique(self) -> None:
        for criterion in ["", "conflict", "water 40%", "harvest yield", "anything else"]:
            conditions = generate_revocation_conditions(criterion)
            halts = [c for c in conditions if c.condition == "critical_failure_reported"]
            assert len(halts) == 1
            assert conditions[-1].action == "immediate_halt"
            assert conditions[-1].recorded_by == "any_monitor"

    def test_conflict_rule_uses_first_monitor(self) -> None:
        monitoring = Monitoring(who=("water_council", "youth_group"), frequency="P1W")
        conditions = generate_revocation_conditions("Conflict drops; conflict index", monitoring)
        assert conditions[0].condition == "community_conflict_index > 30%"
        assert conditions[0].action == "trigger_review"
        assert conditions[0].recorded_by == "water_council"
        assert conditions[0].check_frequency == "P1W"

    def test_conflict_rule_defaults_to_council(self) -> None:
        conditions = generate_revocation_conditions("less conflict")
        assert conditions[0].recorded_by == "community_council"

    def test_matching_is_case_sensitive(self) -> None:
        """Test "Conflict" alone does not trigger the conflict rule."""
        conditions = generate_revocation_conditions("Conflict drops 20% in 2mo")
        assert [c.condition for c in conditions] == ["critical_failure_reported"]

    def test_water_threshold_is_first_percentage_minus_ten(self) -> None:
        conditions = generate_revocation_conditions("water use falls 40% then 70%")
        assert conditions[0].condition == "water_efficiency < 30%"
        assert conditions[0].action == "escalate_to_council"
        assert conditions[0].recorded_by == "sensor:water_monitoring"
        assert conditions[0].check_frequency == "P3D"

    def test_water_without_percentage(self) -> None:
        conditions = generate_revocation_conditions("more water")
        assert len(conditions) == 1

    def test_yield_rule_prefers_farmer_monitor(self) -> None:
        monitoring = Monitoring(who=("council", "farmer_coop"), frequency="P1W")
        conditions = generate_revocation_conditions("harvest improves", monitoring)
        assert conditions[0].condition == "crop_yield < 50% of_target"
        assert conditions[0].action == "auto_revert"
        assert conditions[0].recorded_by == "farmer_coop"

    def test_yield_rule_default_recorder(self) -> None:
        conditions = generate_revocation_conditions("yield improves")
        assert conditions[0].recorded_by == "agricultural_monitor"

    def test_rules_in_order(self) -> None:
        conditions = generate_revocation_conditions("conflict and water 50% and harvest")
        assert [c.action for c in conditions] == [
            "trigger_review",
            "escalate_to_council",
            "auto_revert",
            "immediate_halt",
        ]

    def test_serialized_with_if_then(self) -> None:
        condition = generate_revocation_conditions("")[-1]
        assert condition.to_dict() == {
            "if": "critical_failure_reported",
            "then": "immediate_halt",
            "recorded_by": "any_monitor",
            "description": "Emergency stop if any monitor reports critical failure",
        }
