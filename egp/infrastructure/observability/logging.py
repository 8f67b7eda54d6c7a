"""structlog configuration for the EGP node.

"production" renders one JSON object per line; any other environment
renders colored console output. Inside a request every line carries the
correlation id:

    {"event": "proposal_persisted", "level": "info",
     "timestamp": "2026-03-01T12:00:00.000000Z", "correlation_id": "...",
     "service": "GovernanceLifecycleService", "node_id": "node-andes-1",
     "operation": "propose", "proposal_id": "b..."}

The level comes from LOG_LEVEL (default INFO).
"""

import logging
import os
from typing import cast

import structlog
from structlog.typing import Processor

from egp.infrastructure.observability.correlation import correlation_id_processor

LOG_LEVEL_ENV = "LOG_LEVEL"
DEFAULT_LOG_LEVEL = "INFO"
PRODUCTION = "production"


def resolve_log_level(name: str | None = None) -> int:
    """Map a level name (default: $LOG_LEVEL) to a logging level; INFO if unknown."""
    level_name = (name or os.getenv(LOG_LEVEL_ENV) or DEFAULT_LOG_LEVEL).upper()
    level = logging.getLevelName(level_name)
    return level if isinstance(level, int) else logging.INFO


def configure_structlog(environment: str = PRODUCTION, level: str | None = None) -> None:
    """Configure structlog. Call once at startup.

    Args:
        environment: "production" for JSON lines, anything else for console output.
        level: Level name overriding LOG_LEVEL.
    """
    renderer: Processor
    if environment == PRODUCTION:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            cast(Processor, correlation_id_processor),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(resolve_log_level(level)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
