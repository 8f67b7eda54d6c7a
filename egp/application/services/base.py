"""Structured logging for application services.

Services mix in LoggingMixin, call _init_logger() once in __init__ and
open an operation-scoped logger per call:

    log = self._log_operation("propose", in_response_to=uri)
    log.info("proposal_persisted", proposal_id=proposal_id)

Event names are snake_case and say what happened.
"""

import structlog

from egp.infrastructure.observability.correlation import get_correlation_id


class LoggingMixin:
    """Binds service, component and per-operation context to a structlog logger.

    Attributes:
        _log: Logger bound with service and component.
    """

    _log: structlog.BoundLogger

    def _init_logger(self, component: str = "governance", **context: object) -> None:
        """Bind the service logger.

        Args:
            component: Log category, e.g. "governance" or "advisor".
            **context: Fixed context for every line, e.g. node_id.
        """
        self._log = structlog.get_logger().bind(
            service=type(self).__name__, component=component, **context
        )

    def _log_operation(self, operation: str, **context: object) -> structlog.BoundLogger:
        """Logger for one operation, carrying the request's correlation id if any."""
        log = self._log.bind(operation=operation, **context)
        correlation_id = get_correlation_id()
        if correlation_id:
            log = log.bind(correlation_id=correlation_id)
        return log
