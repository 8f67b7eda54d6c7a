"""Health check and node info endpoints."""

import time

from fastapi import APIRouter, Depends

from egp import __version__
from egp.api.dependencies.governance import (
    get_content_store,
    get_governance_config,
    get_time_authority,
)
from egp.api.models.health import HealthResponse, NodeInfoResponse
from egp.application.ports.content_store import ContentStoreProtocol
from egp.application.ports.time_authority import TimeAuthorityProtocol
from egp.config.governance_config import GovernanceConfig
from egp.domain.models.instant import format_instant

router = APIRouter(tags=["health"])

_STARTED_AT = time.monotonic()


@router.get("/health", response_model=HealthResponse)
async def health_check(
    store: ContentStoreProtocol = Depends(get_content_store),
    clock: TimeAuthorityProtocol = Depends(get_time_authority),
) -> HealthResponse:
    """Return health status.

    The node reports "degraded" rather than failing when the content
    store cannot be reached, so the check itself always answers 200.
    """
    store_status = await store.status()
    return HealthResponse(
        status="healthy" if store_status.get("connected") else "degraded",
        timestamp=format_instant(clock.utcnow()),
        version=__version__,
        uptime=round(time.monotonic() - _STARTED_AT, 3),
        store=store_status,
    )


@router.get("/", response_model=NodeInfoResponse)
async def node_info(
    config: GovernanceConfig = Depends(get_governance_config),
) -> NodeInfoResponse:
    """Describe this node and its endpoints."""
    return NodeInfoResponse(
        version=__version__,
        protocol_version=config.protocol_version,
        node_id=config.node_id,
        endpoints={
            "sense": "POST /sense",
            "propose": "POST /propose",
            "adopt": "POST /adopt",
            "resolve": "GET /{kind}/{id}",
            "health": "GET /health",
            "metrics": "GET /metrics",
        },
    )
