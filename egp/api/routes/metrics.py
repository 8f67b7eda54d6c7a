"""Prometheus scrape endpoint for the lifecycle counters."""

from fastapi import APIRouter, Depends, Response

from egp.bootstrap.metrics import get_governance_metrics
from egp.infrastructure.monitoring.metrics import GovernanceMetrics

router = APIRouter(tags=["metrics"])


@router.get(
    "/metrics",
    summary="Lifecycle counters in Prometheus exposition format",
    response_class=Response,
    responses={200: {"content": {"text/plain": {}}}},
)
async def get_metrics(
    metrics: GovernanceMetrics = Depends(get_governance_metrics),
) -> Response:
    return Response(content=metrics.generate_metrics(), media_type=metrics.content_type)
