"""Prometheus metrics for governance operations.

Operational counters only: how many records and edges were written, how
often advisors degraded, and which operations failed with which error.
Each collector owns a private registry so tests stay isolated.
"""

from prometheus_client import CollectorRegistry, Counter, generate_latest

# Content type for Prometheus metrics endpoint
METRICS_CONTENT_TYPE = "text/plain; version=0.0.4; charset=utf-8"


class GovernanceMetrics:
    """Collects governance lifecycle counters.

    Attributes:
        objects_created_total: Records persisted, by object type.
        relationships_created_total: Edges persisted, by relationship type.
        advisor_degraded_total: Advisor calls that failed or timed out.
        operation_failures_total: Failed lifecycle operations, by error class.
    """

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        """Initialize the counters.

        Args:
            registry: Optional custom registry for testing isolation.
        """
        self._registry = registry or CollectorRegistry()

        self.objects_created_total = Counter(
            name="egp_objects_created_total",
            documentation="Governance records persisted",
            labelnames=["type"],
            registry=self._registry,
        )
        self.relationships_created_total = Counter(
            name="egp_relationships_created_total",
            documentation="Relationship edges persisted",
            labelnames=["type"],
            registry=self._registry,
        )
        self.advisor_degraded_total = Counter(
            name="egp_advisor_degraded_total",
            documentation="Advisor calls that failed or exceeded their time budget",
            labelnames=["advisor"],
            registry=self._registry,
        )
        self.operation_failures_total = Counter(
            name="egp_operation_failures_total",
            documentation="Lifecycle operations that ended in an error",
            labelnames=["operation", "error"],
            registry=self._registry,
        )

    @property
    def registry(self) -> CollectorRegistry:
        """The registry holding these counters."""
        return self._registry

    def record_object_created(self, object_type: str) -> None:
        self.objects_created_total.labels(type=object_type).inc()

    def record_relationship_created(self, relationship_type: str) -> None:
        self.relationships_created_total.labels(type=relationship_type).inc()

    def record_advisor_degraded(self, advisor: str) -> None:
        self.advisor_degraded_total.labels(advisor=advisor).inc()

    def record_operation_failure(self, operation: str, error: str) -> None:
        self.operation_failures_total.labels(operation=operation, error=error).inc()

    def generate_metrics(self) -> bytes:
        """Render all counters in Prometheus exposition format."""
        return generate_latest(self._registry)

    @property
    def content_type(self) -> str:
        """Content type of generate_metrics() output."""
        return METRICS_CONTENT_TYPE
