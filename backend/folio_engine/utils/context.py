# backend/folio_engine/utils/context.py
"""
Request-scoped context for Folio Engine.

Holds the correlation ID of the request being served. contextvars keeps
the value isolated per request and carries it through async/await, so
every log record emitted while handling a request can be tagged with it.

Usage:
    from folio_engine.utils.context import get_correlation_id, set_correlation_id

    set_correlation_id("abc-123")   # middleware
    get_correlation_id()            # anywhere else -> "abc-123"
"""

from contextvars import ContextVar, Token

_correlation_id_var: ContextVar[str | None] = ContextVar("correlation_id", default=None)


def get_correlation_id() -> str | None:
    """Correlation ID of the current request, or None outside a request."""
    return _correlation_id_var.get()


def set_correlation_id(correlation_id: str) -> Token:
    """
    Bind a correlation ID to the current context.

    Returns:
        Token that restores the previous value via reset_correlation_id()
    """
    return _correlation_id_var.set(correlation_id)


def reset_correlation_id(token: Token) -> None:
    _correlation_id_var.reset(token)


def clear_correlation_id() -> None:
    _correlation_id_var.set(None)
