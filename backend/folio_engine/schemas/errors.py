# backend/folio_engine/schemas/errors.py
"""
Pydantic schemas for error responses.

Every handler registered in main.py answers with one of these shapes, so
clients parse a single error format regardless of which layer failed.
"""

from typing import Any

from pydantic import BaseModel, Field


class ErrorDetail(BaseModel):
    """Standard error body for service-layer and HTTP errors."""

    error: str = Field(
        ...,
        description="Error type (e.g. 'LedgerFormatError', 'UnsupportedSchemaVersionError')"
    )
    message: str = Field(
        ...,
        description="Human-readable error message"
    )
    details: dict[str, Any] | None = Field(
        default=None,
        description="Structured context, e.g. the offending schema version"
    )


class ValidationErrorDetail(BaseModel):
    """Request validation failures (422), one entry per invalid field."""

    error: str = Field(default="ValidationError")
    message: str = Field(default="Request validation failed")
    details: list[dict[str, Any]] = Field(
        ...,
        description="Entries of {field, message, type}"
    )
