# backend/folio_engine/middleware/__init__.py
"""
Middleware components for Folio Engine.

- CorrelationIdMiddleware: request tracing
- limiter / rate_limit_exceeded_handler: slowapi rate limiting

Usage:
    from folio_engine.middleware import CorrelationIdMiddleware, limiter

    app.add_middleware(CorrelationIdMiddleware)
    app.state.limiter = limiter
"""

from folio_engine.middleware.correlation import CorrelationIdMiddleware
from folio_engine.middleware.rate_limit import (
    RATE_LIMIT_COMPUTE,
    RATE_LIMIT_HEALTH,
    RATE_LIMIT_LEDGER,
    SlowAPIMiddleware,
    limiter,
    rate_limit_exceeded_handler,
)

__all__ = [
    "CorrelationIdMiddleware",
    "limiter",
    "rate_limit_exceeded_handler",
    "SlowAPIMiddleware",
    "RATE_LIMIT_COMPUTE",
    "RATE_LIMIT_HEALTH",
    "RATE_LIMIT_LEDGER",
]
