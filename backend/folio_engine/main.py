# backend/folio_engine/main.py
"""
FastAPI application entry point.

This file:
- Configures application-wide logging
- Creates the FastAPI application
- Registers global exception handlers
- Registers all routers
- Defines global endpoints (health checks)
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from folio_engine.config import settings
from folio_engine.middleware import (
    RATE_LIMIT_HEALTH,
    CorrelationIdMiddleware,
    SlowAPIMiddleware,
    limiter,
    rate_limit_exceeded_handler,
)
from folio_engine.routers import accounting_router, ledger_router, refresh_router
from folio_engine.schemas.errors import ErrorDetail, ValidationErrorDetail
from folio_engine.services.exceptions import (
    LedgerEmptyError,
    LedgerError,
    LedgerFormatError,
    ServiceError,
    SnapshotDecodeError,
    SnapshotError,
    UnsupportedLedgerVersionError,
    UnsupportedSchemaVersionError,
    ValidationError,
)
from folio_engine.utils.logging import setup_logging

logger = logging.getLogger(__name__)

# =============================================================================
# LOGGING SETUP (must be before app creation)
# =============================================================================

setup_logging()

# =============================================================================
# APPLICATION SETUP
# =============================================================================

app = FastAPI(
    title=settings.app_name,
    description="Transaction-ledger portfolio accounting API",
    version=settings.app_version,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)


# =============================================================================
# MIDDLEWARE (order matters: last added = first executed)
# =============================================================================

app.state.limiter = limiter
app.add_middleware(SlowAPIMiddleware)
app.add_middleware(CorrelationIdMiddleware)


# =============================================================================
# GLOBAL EXCEPTION HANDLERS
# =============================================================================
# Service exceptions carry no HTTP knowledge; the mapping lives here.
# =============================================================================

app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)


@app.exception_handler(LedgerEmptyError)
async def ledger_empty_handler(request: Request, exc: LedgerEmptyError) -> JSONResponse:
    """Handle empty import files (400)."""
    logger.warning("Ledger import rejected: empty file")
    return JSONResponse(
        status_code=400,
        content=ErrorDetail(
            error="LedgerEmptyError",
            message=str(exc),
            details=None,
        ).model_dump(),
    )


@app.exception_handler(LedgerFormatError)
async def ledger_format_handler(request: Request, exc: LedgerFormatError) -> JSONResponse:
    """Handle unreadable import files (400)."""
    logger.warning(f"Ledger import rejected: {exc.detail}")
    return JSONResponse(
        status_code=400,
        content=ErrorDetail(
            error="LedgerFormatError",
            message=str(exc),
            details={"reason": exc.detail},
        ).model_dump(),
    )


@app.exception_handler(UnsupportedLedgerVersionError)
async def ledger_version_handler(
    request: Request, exc: UnsupportedLedgerVersionError
) -> JSONResponse:
    """Handle import files with an unknown format version (400)."""
    logger.warning(f"Ledger import rejected: version {exc.version}")
    return JSONResponse(
        status_code=400,
        content=ErrorDetail(
            error="UnsupportedLedgerVersionError",
            message=str(exc),
            details={"version": exc.version},
        ).model_dump(),
    )


@app.exception_handler(LedgerError)
async def ledger_error_handler(request: Request, exc: LedgerError) -> JSONResponse:
    """Handle other ledger errors (400)."""
    logger.warning(f"Ledger error: {exc}")
    return JSONResponse(
        status_code=400,
        content=ErrorDetail(
            error="LedgerError",
            message=str(exc),
            details=None,
        ).model_dump(),
    )


@app.exception_handler(UnsupportedSchemaVersionError)
async def schema_version_handler(
    request: Request, exc: UnsupportedSchemaVersionError
) -> JSONResponse:
    """Handle snapshots/displays with an unknown schema version (400)."""
    logger.warning(f"Unsupported {exc.kind} schema version: {exc.version}")
    return JSONResponse(
        status_code=400,
        content=ErrorDetail(
            error="UnsupportedSchemaVersionError",
            message=str(exc),
            details={
                "kind": exc.kind,
                "version": exc.version,
                "expected": exc.expected,
            },
        ).model_dump(),
    )


@app.exception_handler(SnapshotDecodeError)
async def snapshot_decode_handler(request: Request, exc: SnapshotDecodeError) -> JSONResponse:
    """Handle malformed snapshot payloads (400)."""
    logger.warning(f"Snapshot decode error: {exc}")
    return JSONResponse(
        status_code=400,
        content=ErrorDetail(
            error="SnapshotDecodeError",
            message=str(exc),
            details={"kind": exc.kind},
        ).model_dump(),
    )


@app.exception_handler(SnapshotError)
async def snapshot_error_handler(request: Request, exc: SnapshotError) -> JSONResponse:
    """Handle other snapshot errors (400)."""
    logger.warning(f"Snapshot error: {exc}")
    return JSONResponse(
        status_code=400,
        content=ErrorDetail(
            error="SnapshotError",
            message=str(exc),
            details=None,
        ).model_dump(),
    )


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    """Handle service-level validation errors (400)."""
    logger.warning(f"Validation error: {exc}")
    return JSONResponse(
        status_code=400,
        content=ErrorDetail(
            error="ValidationError",
            message=str(exc),
            details={"field": exc.field} if exc.field else None,
        ).model_dump(),
    )


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    """Handle generic service errors (500)."""
    logger.error(f"Service error: {exc}")
    return JSONResponse(
        status_code=500,
        content=ErrorDetail(
            error="ServiceError",
            message=str(exc),
            details=None,
        ).model_dump(),
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """
    Convert the {"detail": "..."} format to ErrorDetail.

    Registered on Starlette's base class so routing errors (unknown path,
    wrong method) are covered as well as FastAPI's HTTPException.
    """
    error_types = {
        400: "BadRequestError",
        404: "NotFoundError",
        405: "MethodNotAllowedError",
        413: "PayloadTooLargeError",
        422: "ValidationError",
        429: "RateLimitError",
        500: "InternalServerError",
        503: "ServiceUnavailableError",
    }
    error_type = error_types.get(exc.status_code, "HTTPError")

    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorDetail(
            error=error_type,
            message=str(exc.detail) if exc.detail else "An error occurred",
            details=None,
        ).model_dump(),
        headers=exc.headers,
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """
    Convert the default 422 body to ValidationErrorDetail.
    """
    errors = [
        {
            "field": ".".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors()
    ]

    return JSONResponse(
        status_code=422,
        content=ValidationErrorDetail(
            error="ValidationError",
            message="Request validation failed",
            details=errors,
        ).model_dump(),
    )


# =============================================================================
# ROUTER REGISTRATION
# =============================================================================

app.include_router(accounting_router)  # /portfolio/*
app.include_router(refresh_router)  # /refresh/*
app.include_router(ledger_router)  # /ledger/*


# =============================================================================
# GLOBAL ENDPOINTS
# =============================================================================

@app.get("/", tags=["Health"])
@limiter.limit(RATE_LIMIT_HEALTH)
def root(request: Request):
    """API root - basic application info."""
    return {
        "message": f"Welcome to {settings.app_name}!",
        "version": settings.app_version,
        "docs": "/docs",
        "redoc": "/redoc",
    }


@app.get("/health", tags=["Health"])
@limiter.limit(RATE_LIMIT_HEALTH)
def health_check(request: Request):
    """
    Health check.

    The service has no external dependencies (no database, no market data
    provider), so it is healthy whenever it can answer. The response echoes
    the accounting configuration for operators.
    """
    return {
        "status": "healthy",
        "environment": settings.environment,
        "version": settings.app_version,
        "checks": {
            "accounting": {
                "status": "healthy",
                "zero_balance_tolerance": str(settings.zero_balance_tolerance),
                "display_max_holdings": settings.display_max_holdings,
                "stale_after_minutes": settings.stale_after_minutes,
            },
        },
    }


@app.get("/health/live", tags=["Health"])
@limiter.limit(RATE_LIMIT_HEALTH)
def liveness_check(request: Request):
    """Liveness probe: 200 whenever the process is running."""
    return {"status": "alive"}
