# backend/folio_engine/schemas/transactions.py
"""
Pydantic schemas for ledger transactions and price quotes.

These schemas define:
- What a client sends for each ledger entry (TransactionIn)
- What the API returns for ledger entries (TransactionOut)
- The price input contract (AssetQuoteIn)

Validation layers:
- Field constraints: type, length, numeric limits
- Field validators: normalization (transaction type case, naive timestamps)
- Engine: assumes every transaction it receives already passed these checks

IMPORTANT: All financial values use Decimal for precision.
Never use float for money! Decimals are serialized as strings in JSON.
"""

import uuid
from datetime import datetime, timezone
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from folio_engine.models import AssetQuote, Transaction, TransactionType


def ensure_utc(value: datetime | None) -> datetime | None:
    """Treat naive datetimes as UTC; aware ones pass through unchanged."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


# =============================================================================
# TRANSACTION SCHEMAS
# =============================================================================

class TransactionIn(BaseModel):
    """
    One validated ledger entry.

    Quantity must be strictly positive; unit price may be zero (airdrops,
    gifts) but never negative.
    """

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        description="Transaction identifier (generated when omitted)"
    )
    asset_id: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Asset identifier",
        examples=["bitcoin", "ethereum"]
    )
    transaction_type: TransactionType = Field(
        ...,
        description="BUY or SELL (case-insensitive)",
        examples=["BUY", "sell"]
    )
    quantity: Decimal = Field(
        ...,
        gt=0,
        description="Units traded (must be positive)",
        examples=["2", "0.00000001"]
    )
    unit_price: Decimal = Field(
        ...,
        ge=0,
        description="Price per unit at trade time (zero or positive)",
        examples=["40000", "0.0001234"]
    )
    timestamp: datetime = Field(
        ...,
        description="When the trade happened (naive values are taken as UTC)",
        examples=["2025-01-15T14:30:00Z"]
    )
    notes: str | None = Field(
        default=None,
        max_length=500,
        description="Optional free text"
    )

    # =========================================================================
    # FIELD VALIDATORS (Normalization)
    # =========================================================================

    @field_validator("asset_id")
    @classmethod
    def normalize_asset_id(cls, v: str) -> str:
        """Trim whitespace; reject blank ids."""
        v = v.strip()
        if not v:
            raise ValueError("Asset id cannot be blank")
        return v

    @field_validator("transaction_type", mode="before")
    @classmethod
    def normalize_transaction_type(cls, v):
        """Accept 'buy' / 'Sell' as well as the canonical upper-case values."""
        if isinstance(v, str):
            return v.strip().upper()
        return v

    @field_validator("timestamp")
    @classmethod
    def ensure_timezone(cls, v: datetime) -> datetime:
        """Treat naive timestamps as UTC so ordering is well defined."""
        return ensure_utc(v)

    def to_domain(self) -> Transaction:
        """Convert to the immutable engine record."""
        return Transaction(
            id=self.id,
            asset_id=self.asset_id,
            transaction_type=self.transaction_type,
            quantity=self.quantity,
            unit_price=self.unit_price,
            timestamp=self.timestamp,
            notes=self.notes,
        )


class TransactionOut(BaseModel):
    """Ledger entry as returned by the API (e.g. inside a closed cycle)."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    asset_id: str
    transaction_type: TransactionType
    quantity: Decimal
    unit_price: Decimal
    timestamp: datetime
    notes: str | None = None


# =============================================================================
# PRICE SCHEMAS
# =============================================================================

class AssetQuoteIn(BaseModel):
    """Current price and display fields for one asset."""

    asset_id: str = Field(..., min_length=1, max_length=100)
    current_price: Decimal = Field(
        ...,
        ge=0,
        description="Current market price per unit",
        examples=["48000"]
    )
    symbol: str = Field(default="", max_length=20, examples=["BTC"])
    name: str = Field(default="", max_length=100, examples=["Bitcoin"])

    @field_validator("asset_id")
    @classmethod
    def normalize_asset_id(cls, v: str) -> str:
        return v.strip()

    def to_domain(self) -> AssetQuote:
        return AssetQuote(
            asset_id=self.asset_id,
            current_price=self.current_price,
            symbol=self.symbol,
            name=self.name,
        )


class PriceIn(BaseModel):
    """Fresh price for the refresh path (price map value)."""

    current_price: Decimal = Field(..., ge=0, examples=["48000"])
