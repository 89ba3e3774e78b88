# backend/folio_engine/models.py
"""
Domain records consumed by the accounting engine.

The ledger is append-only and owned by the surrounding application. The
engine only ever reads these records, groups and reorders copies of them,
and recomputes every derived value from scratch.

All quantities and prices are Decimal. Never float.
"""
import enum
import uuid
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal


class TransactionType(str, enum.Enum):
    BUY = "BUY"
    SELL = "SELL"


@dataclass(frozen=True)
class Transaction:
    """
    One buy or sell event for one asset.

    Attributes:
        id: Unique transaction identifier
        asset_id: Asset identifier (e.g. "bitcoin")
        transaction_type: BUY or SELL
        quantity: Units traded, always > 0
        unit_price: Price per unit at trade time, always >= 0
        timestamp: When the trade happened
        notes: Optional free text
    """

    id: uuid.UUID
    asset_id: str
    transaction_type: TransactionType
    quantity: Decimal
    unit_price: Decimal
    timestamp: datetime
    notes: str | None = None

    @property
    def is_buy(self) -> bool:
        return self.transaction_type == TransactionType.BUY

    @property
    def is_sell(self) -> bool:
        return self.transaction_type == TransactionType.SELL

    @property
    def signed_quantity(self) -> Decimal:
        """+quantity for BUY, -quantity for SELL."""
        return self.quantity if self.is_buy else -self.quantity

    @property
    def gross_amount(self) -> Decimal:
        """quantity × unit_price (cost for a buy, revenue for a sell)."""
        return self.quantity * self.unit_price


@dataclass(frozen=True)
class AssetQuote:
    """
    Asset snapshot with its current market price.

    Supplied fresh by the market-data collaborator on every recompute.
    """

    asset_id: str
    current_price: Decimal
    symbol: str = ""
    name: str = ""
