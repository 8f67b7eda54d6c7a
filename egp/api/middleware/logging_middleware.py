"""Request logging and correlation id propagation.

The X-Correlation-ID request header, or a fresh UUID4, is bound for the
duration of the request so every service log line carries it, and is
echoed on the response. Each request is logged once on completion with
status and duration, or with the exception when the app raised.
"""

import time
from collections.abc import Awaitable, Callable

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from egp.infrastructure.observability.correlation import (
    generate_correlation_id,
    reset_correlation_id,
    set_correlation_id,
)

CORRELATION_HEADER = "X-Correlation-ID"

logger = structlog.get_logger()

NextHandler = Callable[[Request], Awaitable[Response]]


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)


class LoggingMiddleware(BaseHTTPMiddleware):
    """Binds a correlation id per request and logs the outcome."""

    async def dispatch(self, request: Request, call_next: NextHandler) -> Response:
        correlation_id = request.headers.get(CORRELATION_HEADER) or generate_correlation_id()
        token = set_correlation_id(correlation_id)
        try:
            response = await self._logged(request, call_next)
        finally:
            reset_correlation_id(token)
        response.headers[CORRELATION_HEADER] = correlation_id
        return response

    async def _logged(self, request: Request, call_next: NextHandler) -> Response:
        log = logger.bind(method=request.method, path=request.url.path)
        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as exc:
            log.exception(
                "request_failed", error_type=type(exc).__name__, duration_ms=_elapsed_ms(started)
            )
            raise
        log.info(
            "request_completed",
            status_code=response.status_code,
            duration_ms=_elapsed_ms(started),
        )
        return response
