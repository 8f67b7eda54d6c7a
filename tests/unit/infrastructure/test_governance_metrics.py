"""Unit tests for GovernanceMetrics."""

from prometheus_client import CollectorRegistry

from egp.infrastructure.monitoring.metrics import METRICS_CONTENT_TYPE, GovernanceMetrics


class TestGovernanceMetrics:
    """Tests for the governance counters."""

    def test_private_registries_are_isolated(self) -> None:
        first = GovernanceMetrics()
        second = GovernanceMetrics()

        first.record_object_created("sense")

        assert first.registry.get_sample_value("egp_objects_created_total", {"type": "sense"}) == 1.0
        assert second.registry.get_sample_value("egp_objects_created_total", {"type": "sense"}) is None

    def test_custom_registry(self) -> None:
        registry = CollectorRegistry()

        metrics = GovernanceMetrics(registry=registry)

        assert metrics.registry is registry

    def test_counters_by_label(self) -> None:
        metrics = GovernanceMetrics()

        metrics.record_relationship_created("responds_to")
        metrics.record_relationship_created("responds_to")
        metrics.record_advisor_degraded("conflict_detector")
        metrics.record_operation_failure("adopt", "ReferenceExpiredError")

        registry = metrics.registry
        assert registry.get_sample_value(
            "egp_relationships_created_total", {"type": "responds_to"}
        ) == 2.0
        assert registry.get_sample_value(
            "egp_advisor_degraded_total", {"advisor": "conflict_detector"}
        ) == 1.0
        assert registry.get_sample_value(
            "egp_operation_failures_total",
            {"operation": "adopt", "error": "ReferenceExpiredError"},
        ) == 1.0

    def test_exposition_format(self) -> None:
        metrics = GovernanceMetrics()
        metrics.record_object_created("propose")

        output = metrics.generate_metrics().decode("utf-8")

        assert "# TYPE egp_objects_created_total counter" in output
        assert 'egp_objects_created_total{type="propose"} 1.0' in output
        assert metrics.content_type == METRICS_CONTENT_TYPE
