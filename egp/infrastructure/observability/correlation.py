"""Request correlation ids for log tracing.

The id of the request being handled sits in a ContextVar, so it follows
the request across await points and correlation_id_processor stamps it
on every log line. LoggingMiddleware binds it from the X-Correlation-ID
header, or a fresh UUID4, and restores the previous value when the
response has been produced.
"""

from contextvars import ContextVar, Token
from typing import Any
from uuid import uuid4

_correlation_id: ContextVar[str] = ContextVar("egp_correlation_id", default="")


def generate_correlation_id() -> str:
    return str(uuid4())


def get_correlation_id() -> str:
    """Correlation id of the current request, or "" outside a request."""
    return _correlation_id.get()


def set_correlation_id(correlation_id: str) -> Token[str]:
    """Bind a correlation id to the current context.

    Returns:
        Token to hand to reset_correlation_id().
    """
    return _correlation_id.set(correlation_id)


def reset_correlation_id(token: Token[str]) -> None:
    """Restore the id that was bound before the matching set_correlation_id()."""
    _correlation_id.reset(token)


def correlation_id_processor(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """structlog processor stamping the current correlation id.

    A correlation_id already bound on the logger is left as is.
    """
    correlation_id = _correlation_id.get()
    if correlation_id:
        event_dict.setdefault("correlation_id", correlation_id)
    return event_dict
