# backend/folio_engine/services/accounting/types.py
"""
Internal data types for the accounting engine.

These dataclasses are used internally by the calculators. They are NOT
Pydantic schemas - those are defined in folio_engine/schemas/accounting.py
for API serialization.

Design Principles:
- Immutable value objects (frozen=True)
- Use Decimal for ALL financial values (never float)
- Derived metrics are properties, computed from stored fields
- Warnings accumulate for data quality tracking

Type Hierarchy:
    CycleSplit          - Closed cycles + open remainder for one asset
    OpenPosition        - Aggregates of an open remainder
    Holding             - Currently held position with market value
    ClosedPosition      - One completed buy-to-sell cycle
    ClosedPositionGroup - All closed cycles of one asset
    PortfolioSummary    - Portfolio-wide totals
    PortfolioState      - Everything above for one recompute
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from folio_engine.models import AssetQuote, Transaction
from folio_engine.services.constants import ZERO
from folio_engine.utils.decimal_math import percentage_change, percentage_of


# =============================================================================
# CYCLE DETECTION
# =============================================================================

@dataclass(frozen=True)
class CycleSplit:
    """
    Partition of one asset's chronologically sorted transactions.

    Attributes:
        asset_id: Asset the transactions belong to
        closed_cycles: Slices whose running balance returned to zero
        open_remainder: Transactions after the last closed cycle
        warnings: Data quality notes (e.g. oversold balance)
    """

    asset_id: str
    closed_cycles: tuple[tuple[Transaction, ...], ...]
    open_remainder: tuple[Transaction, ...]
    warnings: tuple[str, ...] = ()

    @property
    def has_open_position(self) -> bool:
        return len(self.open_remainder) > 0


# =============================================================================
# OPEN POSITIONS
# =============================================================================

@dataclass(frozen=True)
class OpenPosition:
    """
    Aggregated open-remainder data for a single asset.

    Attributes:
        asset_id: Asset identifier
        quantity: Net units held (bought - sold)
        avg_cost: Weighted average cost of buys in the remainder
        total_bought_qty: Units bought in the remainder
        total_bought_cost: Capital spent on those buys
        total_sold_qty: Units sold in the remainder
        remaining_cost: Buy cost minus sells costed at avg_cost

    Note:
        Sells reduce remaining_cost at avg_cost, never at their own price,
        so the cost basis per unit is stable across partial sells.
    """

    asset_id: str
    quantity: Decimal
    avg_cost: Decimal
    total_bought_qty: Decimal
    total_bought_cost: Decimal
    total_sold_qty: Decimal
    remaining_cost: Decimal

    @property
    def has_position(self) -> bool:
        """True if there are units currently held."""
        return self.quantity > ZERO


@dataclass(frozen=True)
class Holding:
    """
    Currently held position for one asset, valued at the current price.

    Invariant: total_quantity > 0. A holding with quantity <= 0 is never built.
    """

    asset_id: str
    asset: AssetQuote
    total_quantity: Decimal
    avg_cost: Decimal
    current_value: Decimal

    @property
    def cost_basis(self) -> Decimal:
        """total_quantity × avg_cost."""
        return self.total_quantity * self.avg_cost

    @property
    def profit_loss(self) -> Decimal:
        """Unrealized P&L: current_value - cost_basis."""
        return self.current_value - self.cost_basis

    @property
    def profit_loss_percentage(self) -> Decimal:
        """(current_value / cost_basis - 1) × 100, 0 when cost basis is 0."""
        return percentage_change(self.current_value, self.cost_basis)


# =============================================================================
# CLOSED POSITIONS
# =============================================================================

@dataclass(frozen=True)
class ClosedPosition:
    """
    One completed buy-to-sell trading cycle for an asset.

    Attributes:
        id: Deterministic identifier (derived from the closing transaction)
        asset_id: Asset identifier
        asset: Asset snapshot at computation time
        total_quantity: Units bought in the cycle (equals units sold)
        avg_cost_price: Weighted average buy price of the cycle
        avg_sale_price: Weighted average sell price of the cycle
        closed_date: Timestamp of the sell that closed the cycle
        cycle_transactions: The slice that produced this position
    """

    id: uuid.UUID
    asset_id: str
    asset: AssetQuote
    total_quantity: Decimal
    avg_cost_price: Decimal
    avg_sale_price: Decimal
    closed_date: datetime
    cycle_transactions: tuple[Transaction, ...]

    @property
    def realized_pnl(self) -> Decimal:
        """(avg_sale_price - avg_cost_price) × total_quantity."""
        return (self.avg_sale_price - self.avg_cost_price) * self.total_quantity

    @property
    def realized_pnl_percentage(self) -> Decimal:
        """(avg_sale_price / avg_cost_price - 1) × 100, 0 for a zero cost price."""
        return percentage_change(self.avg_sale_price, self.avg_cost_price)

    @property
    def invested(self) -> Decimal:
        return self.avg_cost_price * self.total_quantity

    @property
    def revenue(self) -> Decimal:
        return self.avg_sale_price * self.total_quantity


@dataclass(frozen=True)
class ClosedPositionGroup:
    """
    All closed cycles of one asset rolled up for display.

    total_realized_pnl_percentage is revenue over invested capital across
    all cycles, so larger cycles weigh more. It is NOT a mean of the
    per-cycle percentages.
    """

    asset_id: str
    asset: AssetQuote
    cycle_count: int
    total_realized_pnl: Decimal
    total_realized_pnl_percentage: Decimal
    most_recent_close_date: datetime
    total_invested: Decimal
    total_revenue: Decimal
    closed_positions: tuple[ClosedPosition, ...]


# =============================================================================
# PORTFOLIO SUMMARY
# =============================================================================

@dataclass(frozen=True)
class PortfolioSummary:
    """
    Portfolio-wide performance metrics.

    Attributes:
        total_value: Sum of open holdings' current value
        unrealized_pnl: Sum of open holdings' profit/loss
        closed_realized_pnl: Sum of closed cycles' realized P&L
        partial_realized_pnl: Gains locked in by partial sells of open positions
        total_open_cost: Sum of open holdings' cost basis
        total_closed_cost: Sum of closed cycles' invested capital
    """

    total_value: Decimal
    unrealized_pnl: Decimal
    closed_realized_pnl: Decimal
    total_open_cost: Decimal
    total_closed_cost: Decimal
    partial_realized_pnl: Decimal = ZERO

    @property
    def realized_pnl(self) -> Decimal:
        """Closed-cycle realized P&L plus partial realized gains."""
        return self.closed_realized_pnl + self.partial_realized_pnl

    @property
    def total_pnl(self) -> Decimal:
        return self.unrealized_pnl + self.realized_pnl

    @property
    def total_pnl_percentage(self) -> Decimal:
        """total_pnl / (total_open_cost + total_closed_cost) × 100, 0 if no cost."""
        return percentage_of(
            self.total_pnl, self.total_open_cost + self.total_closed_cost
        )


@dataclass(frozen=True)
class PortfolioState:
    """
    Complete derived state for one recompute of the ledger.

    Holdings are sorted by current value (highest first); closed positions
    and groups by close date (most recent first).
    """

    holdings: tuple[Holding, ...]
    closed_positions: tuple[ClosedPosition, ...]
    closed_position_groups: tuple[ClosedPositionGroup, ...]
    partial_realized_gains: Decimal
    summary: PortfolioSummary
    warnings: tuple[str, ...] = field(default_factory=tuple)

    @property
    def is_empty(self) -> bool:
        """True when there is nothing open and nothing closed."""
        return not self.holdings and not self.closed_positions
