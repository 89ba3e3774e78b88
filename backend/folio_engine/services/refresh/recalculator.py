# backend/folio_engine/services/refresh/recalculator.py
"""
Snapshot recalculation for the constrained refresh process.

Revalues a RefreshSnapshot with fresh prices without access to the ledger:

    current_value  = quantity × price
    cost_basis     = quantity × avg_cost
    pnl_amount     = current_value - cost_basis
    pnl_percentage = (current_value / cost_basis - 1) × 100   (0 if cost_basis == 0)

Assets missing from the price map are left out of the holdings AND the
totals, so a partial price feed shrinks the aggregate instead of
corrupting it. realized_pnl passes through unchanged.

This module depends only on the refresh types and the shared Decimal
helpers, never on the accounting engine, so it can run unmodified in a
separate process.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import datetime, timedelta

from folio_engine.models import AssetQuote
from folio_engine.services.constants import DISPLAY_MAX_HOLDINGS, STALE_AFTER_MINUTES
from folio_engine.services.refresh.types import (
    DisplayHolding,
    PortfolioDisplay,
    RefreshableHolding,
    RefreshSnapshot,
)
from folio_engine.utils.decimal_math import decimal_sum, percentage_change

logger = logging.getLogger(__name__)


def top_holdings(
        holdings: list[DisplayHolding],
        limit: int,
) -> tuple[DisplayHolding, ...]:
    """Highest current value first (ties by asset id), cut to limit."""
    ordered = sorted(holdings, key=lambda h: (-h.current_value, h.asset_id))
    return tuple(ordered[:limit])


class SnapshotRecalculator:
    """
    Pure recalculation of a RefreshSnapshot against a price map.

    Attributes:
        _max_holdings: Holdings kept in the display aggregate
        _stale_after: Staleness threshold stamped on the output
    """

    def __init__(
            self,
            max_holdings: int = DISPLAY_MAX_HOLDINGS,
            stale_after_minutes: int = STALE_AFTER_MINUTES,
    ) -> None:
        self._max_holdings = max_holdings
        self._stale_after = timedelta(minutes=stale_after_minutes)

    def recalculate(
            self,
            snapshot: RefreshSnapshot,
            quotes: Mapping[str, AssetQuote],
            as_of: datetime,
    ) -> PortfolioDisplay:
        """
        Recalculate portfolio values with fresh prices.

        Args:
            snapshot: Holdings with quantities and average costs
            quotes: Fresh prices keyed by asset_id (may be partial)
            as_of: Timestamp stamped as last_updated

        Returns:
            PortfolioDisplay covering only the priced holdings
        """
        logger.info(f"Recalculating snapshot with {len(snapshot.holdings)} holdings")

        revalued: list[DisplayHolding] = []
        for holding in snapshot.holdings:
            quote = quotes.get(holding.asset_id)
            if quote is None:
                logger.warning(f"No price data for {holding.asset_id}, skipping")
                continue
            revalued.append(self.recalculate_holding(holding, quote))

        # Totals over ALL priced holdings, not just the displayed ones
        total_value = decimal_sum(h.current_value for h in revalued)
        unrealized_pnl = decimal_sum(h.pnl_amount for h in revalued)

        logger.info(
            f"Recalculation complete: value={total_value}, unrealized={unrealized_pnl}"
        )

        return PortfolioDisplay(
            total_value=total_value,
            unrealized_pnl=unrealized_pnl,
            realized_pnl=snapshot.realized_pnl,
            total_pnl=unrealized_pnl + snapshot.realized_pnl,
            holdings=top_holdings(revalued, self._max_holdings),
            last_updated=as_of,
            stale_after=self._stale_after,
        )

    @staticmethod
    def recalculate_holding(
            holding: RefreshableHolding,
            quote: AssetQuote,
    ) -> DisplayHolding:
        """Revalue a single holding at the quoted price."""
        current_value = holding.quantity * quote.current_price
        cost_basis = holding.quantity * holding.avg_cost
        return DisplayHolding(
            asset_id=holding.asset_id,
            symbol=holding.symbol.upper(),
            name=holding.name,
            current_value=current_value,
            pnl_amount=current_value - cost_basis,
            pnl_percentage=percentage_change(current_value, cost_basis),
        )
