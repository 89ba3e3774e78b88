# backend/folio_engine/schemas/ledger.py
"""
Pydantic schemas for ledger export files and import previews.

Export files keep quantities and prices as plain decimal strings
("0.00000001", never "1E-8" or a float) so any reader can restore the exact
values.
"""

import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from folio_engine.schemas.transactions import TransactionIn


# =============================================================================
# EXPORT FILE
# =============================================================================

class ExportTransaction(BaseModel):
    """One ledger entry in an export file."""

    id: uuid.UUID
    asset_id: str
    type: str = Field(..., description="'buy' or 'sell'")
    quantity: str = Field(..., description="Decimal string", examples=["0.00000001"])
    unit_price: str = Field(..., description="Decimal string", examples=["40000"])
    timestamp: datetime
    notes: str | None = None


class ExportFile(BaseModel):
    """Versioned wrapper around exported transactions."""

    version: str = Field(..., examples=["1.0"])
    export_date: datetime
    app_version: str
    transactions: list[ExportTransaction] = Field(default_factory=list)


# =============================================================================
# API
# =============================================================================

class LedgerExportRequest(BaseModel):
    transactions: list[TransactionIn] = Field(default_factory=list)


class ImportRowResponse(BaseModel):
    row_number: int
    asset_id: str
    transaction_type: str | None = None
    quantity: Decimal | None = None
    unit_price: Decimal | None = None
    timestamp: datetime | None = None
    notes: str | None = None
    transaction_id: uuid.UUID | None = None
    errors: list[str] = Field(default_factory=list)


class ImportPreviewResponse(BaseModel):
    """Import preview: rows that can be committed and rows that cannot."""

    file_version: str
    total_row_count: int
    has_valid_data: bool
    valid_rows: list[ImportRowResponse] = Field(default_factory=list)
    invalid_rows: list[ImportRowResponse] = Field(default_factory=list)
