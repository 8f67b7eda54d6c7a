"""FastAPI application entry point for the EGP node."""

import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI

from egp import __version__
from egp.api.dependencies.governance import (
    close_governance_dependencies,
    get_governance_config,
)
from egp.api.middleware.logging_middleware import LoggingMiddleware
from egp.api.routes.governance import router as governance_router
from egp.api.routes.health import router as health_router
from egp.api.routes.metrics import router as metrics_router
from egp.bootstrap.logging import configure_logging


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    config = get_governance_config()
    structlog.get_logger().info(
        "egp_node_started",
        node_id=config.node_id,
        protocol_version=config.protocol_version,
        store_backend=config.store_backend.value,
    )
    yield
    await close_governance_dependencies()


def create_app() -> FastAPI:
    """Build the application with middleware and routers attached."""
    app = FastAPI(
        title="EGP Node",
        description="Reference implementation of the Emergent Governance Protocol",
        version=__version__,
        lifespan=lifespan,
    )
    app.add_middleware(LoggingMiddleware)
    # Single-segment paths before the /{kind}/{id} reader
    app.include_router(health_router)
    app.include_router(metrics_router)
    app.include_router(governance_router)
    return app


load_dotenv()
configure_logging()

app = create_app()


def run() -> None:
    """Serve the app with uvicorn (console script `egp-node`)."""
    uvicorn.run(
        "egp.api.main:app",
        host=os.environ.get("HOST", "0.0.0.0"),
        port=int(os.environ.get("PORT", "3000")),
    )
