# backend/folio_engine/services/refresh/transformer.py
"""
Full-engine side of the refresh boundary.

Projects a PortfolioState into:
- a RefreshSnapshot (quantities and average costs, for later revaluation)
- a PortfolioDisplay (display aggregate, for immediate use)

Both use the same formulas as SnapshotRecalculator, so revaluing the
snapshot at the prices the state was computed with yields the same display.
"""

from __future__ import annotations

from datetime import datetime, timedelta

from folio_engine.services.accounting.types import Holding, PortfolioState
from folio_engine.services.constants import DISPLAY_MAX_HOLDINGS, STALE_AFTER_MINUTES
from folio_engine.services.refresh.recalculator import top_holdings
from folio_engine.services.refresh.types import (
    DisplayHolding,
    PortfolioDisplay,
    RefreshableHolding,
    RefreshSnapshot,
)


def _to_display_holding(holding: Holding) -> DisplayHolding:
    return DisplayHolding(
        asset_id=holding.asset_id,
        symbol=holding.asset.symbol.upper(),
        name=holding.asset.name,
        current_value=holding.current_value,
        pnl_amount=holding.profit_loss,
        pnl_percentage=holding.profit_loss_percentage,
    )


def build_refresh_snapshot(
        state: PortfolioState,
        generated_at: datetime | None = None,
) -> RefreshSnapshot:
    """
    Project a PortfolioState onto the reduced snapshot shape.

    realized_pnl is the summary's realized P&L (closed cycles plus partial
    realized gains).
    """
    return RefreshSnapshot(
        holdings=tuple(
            RefreshableHolding(
                asset_id=h.asset_id,
                symbol=h.asset.symbol,
                name=h.asset.name,
                quantity=h.total_quantity,
                avg_cost=h.avg_cost,
            )
            for h in state.holdings
        ),
        realized_pnl=state.summary.realized_pnl,
        generated_at=generated_at,
    )


def build_display(
        state: PortfolioState,
        as_of: datetime,
        max_holdings: int = DISPLAY_MAX_HOLDINGS,
        stale_after_minutes: int = STALE_AFTER_MINUTES,
) -> PortfolioDisplay:
    """Build the display aggregate directly from a full PortfolioState."""
    summary = state.summary
    return PortfolioDisplay(
        total_value=summary.total_value,
        unrealized_pnl=summary.unrealized_pnl,
        realized_pnl=summary.realized_pnl,
        total_pnl=summary.total_pnl,
        holdings=top_holdings(
            [_to_display_holding(h) for h in state.holdings], max_holdings
        ),
        last_updated=as_of,
        stale_after=timedelta(minutes=stale_after_minutes),
    )
