# backend/folio_engine/services/refresh/types.py
"""
Data types for the refresh path.

The refresh path runs in a separate, resource-constrained process (a
widget or background-refresh extension). It never sees the ledger; it only
receives a RefreshSnapshot written by the full engine plus fresh prices,
and produces a PortfolioDisplay.

Type Hierarchy:
    RefreshableHolding  - Quantity + average cost of one held asset
    RefreshSnapshot     - All refreshable holdings + realized P&L
    DisplayHolding      - One holding as shown on the display surface
    PortfolioDisplay    - Display-ready aggregate (top holdings + totals)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import Decimal

from folio_engine.services.constants import (
    REFRESH_SCHEMA_VERSION,
    STALE_AFTER_MINUTES,
    ZERO,
)


# =============================================================================
# SNAPSHOT (full engine -> refresh process)
# =============================================================================

@dataclass(frozen=True)
class RefreshableHolding:
    """
    Minimal per-asset data needed to revalue a holding.

    Attributes:
        asset_id: Asset identifier, also the key into the price map
        symbol: Trading symbol for display
        name: Display name
        quantity: Units held
        avg_cost: Weighted average cost per unit
    """

    asset_id: str
    symbol: str
    name: str
    quantity: Decimal
    avg_cost: Decimal


@dataclass(frozen=True)
class RefreshSnapshot:
    """
    Reduced projection of a portfolio for the refresh process.

    realized_pnl is carried forward unchanged: no cycle can close without
    new transactions, and the refresh process never sees transactions.
    """

    holdings: tuple[RefreshableHolding, ...]
    realized_pnl: Decimal
    generated_at: datetime | None = None
    schema_version: int = REFRESH_SCHEMA_VERSION

    @property
    def is_empty(self) -> bool:
        return not self.holdings

    @property
    def asset_ids(self) -> list[str]:
        """All asset ids, for a batched price request."""
        return [h.asset_id for h in self.holdings]

    @classmethod
    def empty(cls) -> RefreshSnapshot:
        return cls(holdings=(), realized_pnl=ZERO)


# =============================================================================
# DISPLAY AGGREGATE (written by either process, read by the display)
# =============================================================================

@dataclass(frozen=True)
class DisplayHolding:
    """One holding revalued for display."""

    asset_id: str
    symbol: str
    name: str
    current_value: Decimal
    pnl_amount: Decimal
    pnl_percentage: Decimal


@dataclass(frozen=True)
class PortfolioDisplay:
    """
    Display-ready portfolio aggregate.

    Totals cover every valued holding; `holdings` keeps only the top entries
    by current value (highest first).
    """

    total_value: Decimal
    unrealized_pnl: Decimal
    realized_pnl: Decimal
    total_pnl: Decimal
    holdings: tuple[DisplayHolding, ...]
    last_updated: datetime
    schema_version: int = REFRESH_SCHEMA_VERSION
    stale_after: timedelta = field(
        default=timedelta(minutes=STALE_AFTER_MINUTES), compare=False
    )

    @property
    def is_empty(self) -> bool:
        return not self.holdings and self.total_value == ZERO

    def age(self, now: datetime) -> timedelta:
        return now - self.last_updated

    def is_stale(self, now: datetime) -> bool:
        """True when older than the staleness threshold (60 minutes by default)."""
        return self.age(now) > self.stale_after

    def minutes_since_update(self, now: datetime) -> int:
        return int(self.age(now).total_seconds() / 60)
