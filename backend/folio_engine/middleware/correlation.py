# backend/folio_engine/middleware/correlation.py
"""
Correlation ID middleware for request tracing.

For each request:
1. Take the ID from X-Correlation-ID, else X-Request-ID, else a new UUID4
2. Bind it to the request context so every log record carries it
3. Echo it back in the X-Correlation-ID response header

Usage:
    app.add_middleware(CorrelationIdMiddleware)

Client Usage:
    curl -H "X-Correlation-ID: widget-refresh-42" -X POST \\
         http://localhost:8000/refresh/recalculate -d @payload.json
"""

import logging
import uuid
from typing import Awaitable, Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from folio_engine.utils.context import reset_correlation_id, set_correlation_id

logger = logging.getLogger(__name__)

CORRELATION_ID_HEADER = "X-Correlation-ID"
REQUEST_ID_HEADER = "X-Request-ID"


def resolve_correlation_id(request: Request) -> str:
    """Header value if the client sent one, otherwise a fresh UUID4."""
    for header in (CORRELATION_ID_HEADER, REQUEST_ID_HEADER):
        value = request.headers.get(header)
        if value:
            return value
    return str(uuid.uuid4())


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Binds a correlation ID to each request and echoes it on the response."""

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        correlation_id = resolve_correlation_id(request)
        token = set_correlation_id(correlation_id)
        try:
            response = await call_next(request)
            response.headers[CORRELATION_ID_HEADER] = correlation_id
            return response
        finally:
            reset_correlation_id(token)
