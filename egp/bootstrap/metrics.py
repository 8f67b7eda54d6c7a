"""Bootstrap wiring for governance metrics."""

from __future__ import annotations

from egp.infrastructure.monitoring.metrics import GovernanceMetrics

_governance_metrics: GovernanceMetrics | None = None


def get_governance_metrics() -> GovernanceMetrics:
    """Get the process-wide metrics instance."""
    global _governance_metrics
    if _governance_metrics is None:
        _governance_metrics = GovernanceMetrics()
    return _governance_metrics


def set_governance_metrics(metrics: GovernanceMetrics) -> None:
    """Set custom metrics instance (testing/override)."""
    global _governance_metrics
    _governance_metrics = metrics


def reset_metrics() -> None:
    """Reset metrics singleton (testing cleanup)."""
    global _governance_metrics
    _governance_metrics = None
