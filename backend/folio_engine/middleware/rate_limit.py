# backend/folio_engine/middleware/rate_limit.py
"""
Rate limiting for the API, using slowapi.

Every endpoint is pure computation on its request body, so limits exist
to keep a single client from monopolizing CPU:
- compute endpoints (portfolio state, snapshot, recalculation)
- ledger endpoints (whole-file export/import)
- health checks

Key by: Client IP address (direct peer address)
Storage: In-memory (single-instance deployment)

Usage:
    from folio_engine.middleware.rate_limit import limiter, RATE_LIMIT_COMPUTE

    @router.post("/state")
    @limiter.limit(RATE_LIMIT_COMPUTE)
    def compute_state(request: Request, body: PortfolioComputeRequest):
        ...
"""

import logging

from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address
from starlette.requests import Request
from starlette.responses import JSONResponse

from folio_engine.config import settings
from folio_engine.services.constants import (
    RATE_LIMIT_COMPUTE,
    RATE_LIMIT_HEALTH,
    RATE_LIMIT_LEDGER,
)

logger = logging.getLogger(__name__)

# Seconds a throttled client is told to wait
RETRY_AFTER_SECONDS = 60


# =============================================================================
# LIMITER INSTANCE
# =============================================================================

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[RATE_LIMIT_COMPUTE],
    enabled=settings.rate_limit_enabled,
)


# =============================================================================
# RATE LIMIT EXCEEDED HANDLER
# =============================================================================

async def rate_limit_exceeded_handler(
    request: Request, exc: RateLimitExceeded
) -> JSONResponse:
    """
    429 in the shared ErrorDetail shape, with a Retry-After header.
    """
    limit_info = str(exc.detail) if exc.detail else "Rate limit exceeded"

    logger.warning(
        f"Rate limit exceeded for {get_remote_address(request)}: {limit_info}"
    )

    return JSONResponse(
        status_code=429,
        content={
            "error": "RateLimitError",
            "message": f"Too many requests. {limit_info}",
            "details": {"retry_after": RETRY_AFTER_SECONDS},
        },
        headers={"Retry-After": str(RETRY_AFTER_SECONDS)},
    )


__all__ = [
    "limiter",
    "rate_limit_exceeded_handler",
    "SlowAPIMiddleware",
    "RATE_LIMIT_COMPUTE",
    "RATE_LIMIT_HEALTH",
    "RATE_LIMIT_LEDGER",
]
