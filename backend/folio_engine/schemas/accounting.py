# backend/folio_engine/schemas/accounting.py
"""
Pydantic schemas for portfolio accounting.

These schemas handle:
- The compute request (ledger + current quotes)
- Open holdings with unrealized P&L
- Closed positions (one per completed cycle) and their per-asset groups
- Portfolio summary (realized, unrealized, total)
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from folio_engine.schemas.refresh import PortfolioDisplaySchema, RefreshSnapshotSchema
from folio_engine.schemas.transactions import (
    AssetQuoteIn,
    TransactionIn,
    TransactionOut,
    ensure_utc,
)


# =============================================================================
# REQUEST
# =============================================================================

class PortfolioComputeRequest(BaseModel):
    """Full ledger plus current quotes for every asset to be valued."""

    transactions: list[TransactionIn] = Field(
        default_factory=list,
        description="The whole ledger, in any order"
    )
    quotes: list[AssetQuoteIn] = Field(
        default_factory=list,
        description="Current price per asset; assets without a quote are skipped"
    )
    as_of: datetime | None = Field(
        default=None,
        description="Timestamp for snapshot/display output (defaults to now, UTC)"
    )

    @field_validator("as_of")
    @classmethod
    def as_of_utc(cls, v: datetime | None) -> datetime | None:
        return ensure_utc(v)

    @model_validator(mode="after")
    def reject_duplicate_quotes(self) -> "PortfolioComputeRequest":
        seen: set[str] = set()
        for quote in self.quotes:
            if quote.asset_id in seen:
                raise ValueError(f"Duplicate quote for asset '{quote.asset_id}'")
            seen.add(quote.asset_id)
        return self


# =============================================================================
# ASSET
# =============================================================================

class AssetInfo(BaseModel):
    """Asset snapshot attached to holdings and closed positions."""

    model_config = ConfigDict(from_attributes=True)

    asset_id: str
    symbol: str
    name: str
    current_price: Decimal


# =============================================================================
# HOLDINGS
# =============================================================================

class HoldingResponse(BaseModel):
    """Open position valued at the current price."""

    asset: AssetInfo
    total_quantity: Decimal = Field(..., description="Units currently held")
    avg_cost: Decimal = Field(..., description="Weighted average cost per unit")
    cost_basis: Decimal = Field(..., description="total_quantity × avg_cost")
    current_value: Decimal = Field(..., description="total_quantity × current price")
    profit_loss: Decimal = Field(..., description="Unrealized P&L")
    profit_loss_percentage: Decimal = Field(
        ...,
        description="Unrealized P&L as percentage of cost basis (0 if no cost)"
    )


# =============================================================================
# CLOSED POSITIONS
# =============================================================================

class ClosedPositionResponse(BaseModel):
    """One completed buy-to-sell cycle."""

    id: str
    asset: AssetInfo
    total_quantity: Decimal
    avg_cost_price: Decimal
    avg_sale_price: Decimal
    closed_date: datetime
    realized_pnl: Decimal
    realized_pnl_percentage: Decimal
    cycle_transactions: list[TransactionOut] = Field(default_factory=list)


class ClosedPositionGroupResponse(BaseModel):
    """All closed cycles of one asset."""

    asset: AssetInfo
    cycle_count: int
    total_realized_pnl: Decimal
    total_realized_pnl_percentage: Decimal = Field(
        ...,
        description="(total revenue / total invested - 1) × 100 across cycles"
    )
    most_recent_close_date: datetime
    total_invested: Decimal
    total_revenue: Decimal
    closed_positions: list[ClosedPositionResponse] = Field(default_factory=list)


# =============================================================================
# SUMMARY / STATE
# =============================================================================

class PortfolioSummaryResponse(BaseModel):
    total_value: Decimal
    unrealized_pnl: Decimal
    realized_pnl: Decimal = Field(
        ...,
        description="closed_realized_pnl + partial_realized_pnl"
    )
    closed_realized_pnl: Decimal
    partial_realized_pnl: Decimal
    total_pnl: Decimal
    total_pnl_percentage: Decimal
    total_open_cost: Decimal
    total_closed_cost: Decimal


class PortfolioStateResponse(BaseModel):
    """Complete derived state for the submitted ledger."""

    holdings: list[HoldingResponse] = Field(default_factory=list)
    closed_positions: list[ClosedPositionResponse] = Field(default_factory=list)
    closed_position_groups: list[ClosedPositionGroupResponse] = Field(default_factory=list)
    partial_realized_gains: Decimal
    summary: PortfolioSummaryResponse
    is_empty: bool
    warnings: list[str] = Field(default_factory=list)


class PortfolioRefreshResponse(BaseModel):
    """Snapshot for the refresh process and the display built from the same state."""

    snapshot: RefreshSnapshotSchema
    display: PortfolioDisplaySchema
    warnings: list[str] = Field(default_factory=list)
