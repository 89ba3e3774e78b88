# backend/folio_engine/schemas/refresh.py
"""
Pydantic schemas for the refresh boundary.

These double as the persisted wire format (see services/refresh/codec.py)
and as API request/response bodies. Decimal fields serialize as strings,
so 1E-8 quantities survive a JSON round trip without float rounding.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from folio_engine.schemas.transactions import PriceIn, ensure_utc


# =============================================================================
# SNAPSHOT
# =============================================================================

class RefreshableHoldingSchema(BaseModel):
    """Quantity and average cost of one held asset."""

    model_config = ConfigDict(from_attributes=True)

    asset_id: str = Field(..., min_length=1)
    symbol: str = ""
    name: str = ""
    quantity: Decimal = Field(..., ge=0)
    avg_cost: Decimal = Field(..., ge=0)


class RefreshSnapshotSchema(BaseModel):
    """Versioned snapshot written by the full engine."""

    model_config = ConfigDict(from_attributes=True)

    schema_version: int = Field(..., ge=1)
    holdings: list[RefreshableHoldingSchema] = Field(default_factory=list)
    realized_pnl: Decimal
    generated_at: datetime | None = None

    @field_validator("generated_at")
    @classmethod
    def generated_at_utc(cls, v: datetime | None) -> datetime | None:
        return ensure_utc(v)


# =============================================================================
# DISPLAY AGGREGATE
# =============================================================================

class DisplayHoldingSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    asset_id: str
    symbol: str
    name: str
    current_value: Decimal
    pnl_amount: Decimal
    pnl_percentage: Decimal


class PortfolioDisplaySchema(BaseModel):
    """Versioned display aggregate read by the display surface."""

    model_config = ConfigDict(from_attributes=True)

    schema_version: int = Field(..., ge=1)
    total_value: Decimal
    unrealized_pnl: Decimal
    realized_pnl: Decimal
    total_pnl: Decimal
    holdings: list[DisplayHoldingSchema] = Field(default_factory=list)
    last_updated: datetime

    @field_validator("last_updated")
    @classmethod
    def last_updated_utc(cls, v: datetime) -> datetime:
        """Naive timestamps are read as UTC so staleness checks can compare them."""
        return ensure_utc(v)


# =============================================================================
# API REQUESTS / RESPONSES
# =============================================================================

class RecalculateRequest(BaseModel):
    """Snapshot plus a (possibly partial) price map keyed by asset_id."""

    snapshot: RefreshSnapshotSchema
    prices: dict[str, PriceIn] = Field(default_factory=dict)
    as_of: datetime | None = Field(
        default=None,
        description="Timestamp stamped as last_updated (defaults to now, UTC)"
    )

    @field_validator("as_of")
    @classmethod
    def as_of_utc(cls, v: datetime | None) -> datetime | None:
        return ensure_utc(v)


class RecalculateResponse(BaseModel):
    display: PortfolioDisplaySchema
    is_stale: bool
    minutes_since_update: int
    missing_prices: list[str] = Field(
        default_factory=list,
        description="Snapshot assets left out because no price was supplied"
    )
