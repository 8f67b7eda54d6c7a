"""Observability helpers: structlog configuration and correlation ids."""

from egp.infrastructure.observability.correlation import (
    correlation_id_processor,
    generate_correlation_id,
    get_correlation_id,
    reset_correlation_id,
    set_correlation_id,
)
from egp.infrastructure.observability.logging import configure_structlog, resolve_log_level

__all__ = [
    "configure_structlog",
    "correlation_id_processor",
    "generate_correlation_id",
    "get_correlation_id",
    "reset_correlation_id",
    "resolve_log_level",
    "set_correlation_id",
]
