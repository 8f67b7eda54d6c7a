"""Prometheus metrics for the EGP node."""

from egp.infrastructure.monitoring.metrics import METRICS_CONTENT_TYPE, GovernanceMetrics

__all__ = ["METRICS_CONTENT_TYPE", "GovernanceMetrics"]
