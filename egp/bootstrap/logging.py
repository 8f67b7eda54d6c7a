"""Startup logging wiring."""

import os

from egp.infrastructure.observability import configure_structlog


def configure_logging() -> None:
    """Configure structlog from ENVIRONMENT and LOG_LEVEL."""
    configure_structlog(
        environment=os.environ.get("ENVIRONMENT", "development"),
        level=os.environ.get("LOG_LEVEL"),
    )
