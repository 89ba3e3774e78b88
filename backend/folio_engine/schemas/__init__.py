# backend/folio_engine/schemas/__init__.py
"""
Pydantic schemas for API request/response validation.

Organized by domain:
- accounting: compute request, holdings, closed positions, summary
- errors: error response formats
- ledger: export file and import preview
- refresh: snapshot / display wire format, recalculation request
- transactions: ledger entries and price quotes

Usage:
    from folio_engine.schemas import PortfolioComputeRequest, PortfolioStateResponse
"""

from folio_engine.schemas.accounting import (
    AssetInfo,
    ClosedPositionGroupResponse,
    ClosedPositionResponse,
    HoldingResponse,
    PortfolioComputeRequest,
    PortfolioRefreshResponse,
    PortfolioStateResponse,
    PortfolioSummaryResponse,
)
from folio_engine.schemas.errors import ErrorDetail, ValidationErrorDetail
from folio_engine.schemas.ledger import (
    ExportFile,
    ExportTransaction,
    ImportPreviewResponse,
    ImportRowResponse,
    LedgerExportRequest,
)
from folio_engine.schemas.refresh import (
    DisplayHoldingSchema,
    PortfolioDisplaySchema,
    RecalculateRequest,
    RecalculateResponse,
    RefreshableHoldingSchema,
    RefreshSnapshotSchema,
)
from folio_engine.schemas.transactions import (
    AssetQuoteIn,
    PriceIn,
    TransactionIn,
    TransactionOut,
)

__all__ = [
    # Accounting
    "AssetInfo",
    "ClosedPositionGroupResponse",
    "ClosedPositionResponse",
    "HoldingResponse",
    "PortfolioComputeRequest",
    "PortfolioRefreshResponse",
    "PortfolioStateResponse",
    "PortfolioSummaryResponse",
    # Errors
    "ErrorDetail",
    "ValidationErrorDetail",
    # Ledger
    "ExportFile",
    "ExportTransaction",
    "ImportPreviewResponse",
    "ImportRowResponse",
    "LedgerExportRequest",
    # Refresh
    "DisplayHoldingSchema",
    "PortfolioDisplaySchema",
    "RecalculateRequest",
    "RecalculateResponse",
    "RefreshableHoldingSchema",
    "RefreshSnapshotSchema",
    # Transactions
    "AssetQuoteIn",
    "PriceIn",
    "TransactionIn",
    "TransactionOut",
]
