# backend/folio_engine/services/accounting/calculators.py
"""
Portfolio accounting calculators.

Each calculator follows the Single Responsibility Principle:
- HoldingsCalculator: Open remainder + price -> Holding
- ClosedPositionAggregator: One closed cycle -> ClosedPosition
- ClosedPositionGroupAggregator: ClosedPositions of an asset -> ClosedPositionGroup
- PartialRealizedGainsCalculator: Gains from partial sells in open remainders
- PortfolioSummaryAggregator: Holdings + ClosedPositions -> PortfolioSummary

Design Principles:
- Stateless (no instance state, pure functions)
- Never raise on financial inputs; guarded divisions default to 0
- Weighted Average Cost everywhere, no tax-lot selection
- Uses Decimal for ALL financial calculations

Usage:
    holdings_calc = HoldingsCalculator()
    holding = holdings_calc.calculate(open_remainder, quote)
"""

from __future__ import annotations

import logging
import uuid
from collections import defaultdict
from collections.abc import Iterable, Mapping, Sequence
from decimal import Decimal

from folio_engine.models import AssetQuote, Transaction
from folio_engine.services.accounting.types import (
    ClosedPosition,
    ClosedPositionGroup,
    Holding,
    OpenPosition,
    PortfolioSummary,
)
from folio_engine.services.constants import ZERO
from folio_engine.utils.decimal_math import (
    decimal_sum,
    percentage_change,
    safe_divide,
)

logger = logging.getLogger(__name__)

# Namespace for deterministic closed position ids (uuid5 of asset + closing sell)
CLOSED_POSITION_NAMESPACE = uuid.UUID("6f1f4a52-3c1e-5b8e-9a57-2d0c8f6b1e42")


def weighted_average_cost(transactions: Iterable[Transaction]) -> Decimal:
    """
    Weighted average cost of the BUY transactions.

    Formula:
        avg_cost = Σ(buy.quantity × buy.unit_price) / Σ(buy.quantity)

    Sells are ignored. Returns 0 when there are no buys.
    """
    total_qty = ZERO
    total_cost = ZERO
    for txn in transactions:
        if txn.is_buy:
            total_qty += txn.quantity
            total_cost += txn.gross_amount
    return safe_divide(total_cost, total_qty)


# =============================================================================
# HOLDINGS CALCULATOR
# =============================================================================

class HoldingsCalculator:
    """
    Calculates the currently held position from an open remainder.

    Two passes over the remainder:
    1. Weighted average cost from buys only
    2. Net quantity and remaining cost; sells are costed at that average

    Note:
        Returns no Holding when the net quantity is <= 0.
    """

    def aggregate(
            self,
            asset_id: str,
            open_remainder: Sequence[Transaction],
    ) -> OpenPosition:
        """
        Aggregate an open remainder into position totals.

        Args:
            asset_id: Asset identifier
            open_remainder: Transactions after the last closed cycle

        Returns:
            OpenPosition (may have quantity <= 0)
        """
        # Pass 1: cost basis from contributed capital only
        total_bought_qty = ZERO
        total_bought_cost = ZERO
        for txn in open_remainder:
            if txn.is_buy:
                total_bought_qty += txn.quantity
                total_bought_cost += txn.gross_amount

        avg_cost = safe_divide(total_bought_cost, total_bought_qty)

        # Pass 2: net position
        quantity = ZERO
        remaining_cost = ZERO
        total_sold_qty = ZERO
        for txn in open_remainder:
            if txn.is_buy:
                quantity += txn.quantity
                remaining_cost += txn.gross_amount
            else:
                quantity -= txn.quantity
                remaining_cost -= txn.quantity * avg_cost
                total_sold_qty += txn.quantity

        return OpenPosition(
            asset_id=asset_id,
            quantity=quantity,
            avg_cost=avg_cost,
            total_bought_qty=total_bought_qty,
            total_bought_cost=total_bought_cost,
            total_sold_qty=total_sold_qty,
            remaining_cost=remaining_cost,
        )

    def calculate(
            self,
            open_remainder: Sequence[Transaction],
            quote: AssetQuote,
    ) -> Holding | None:
        """
        Build a Holding from an open remainder and the asset's current price.

        Args:
            open_remainder: Transactions after the last closed cycle
            quote: Asset snapshot with current price

        Returns:
            Holding, or None if nothing is held (quantity <= 0)
        """
        if not open_remainder:
            return None

        position = self.aggregate(quote.asset_id, open_remainder)

        if not position.has_position:
            logger.debug(
                f"No holding for {quote.asset_id}: net quantity {position.quantity}"
            )
            return None

        return Holding(
            asset_id=quote.asset_id,
            asset=quote,
            total_quantity=position.quantity,
            avg_cost=position.avg_cost,
            current_value=position.quantity * quote.current_price,
        )


# =============================================================================
# CLOSED POSITION AGGREGATOR
# =============================================================================

class ClosedPositionAggregator:
    """
    Turns one closed cycle into a ClosedPosition with realized P&L.

    Formulas:
        avg_cost_price = Σ buy cost / Σ buy quantity
        avg_sale_price = Σ sell revenue / Σ sell quantity
        realized_pnl   = (avg_sale_price - avg_cost_price) × total_buy_quantity

    A cycle without both a buy leg and a sell leg is invalid and dropped.
    """

    def aggregate(
            self,
            cycle: Sequence[Transaction],
            quote: AssetQuote,
            closing_transaction: Transaction | None = None,
    ) -> ClosedPosition | None:
        """
        Compute metrics for a single closed cycle.

        Args:
            cycle: Transactions of the cycle, chronological
            quote: Asset snapshot (for display fields)
            closing_transaction: The sell that closed the cycle.
                                 Defaults to the last transaction of the cycle.

        Returns:
            ClosedPosition, or None if the cycle is invalid
        """
        if not cycle:
            return None

        closing = closing_transaction or cycle[-1]

        total_buy_qty = ZERO
        total_buy_cost = ZERO
        total_sell_qty = ZERO
        total_sell_revenue = ZERO

        for txn in cycle:
            if txn.is_buy:
                total_buy_qty += txn.quantity
                total_buy_cost += txn.gross_amount
            else:
                total_sell_qty += txn.quantity
                total_sell_revenue += txn.gross_amount

        if total_buy_qty <= ZERO or total_sell_qty <= ZERO:
            logger.warning(
                f"Discarding invalid cycle for {quote.asset_id} closed by {closing.id}: "
                f"bought {total_buy_qty}, sold {total_sell_qty}"
            )
            return None

        return ClosedPosition(
            id=uuid.uuid5(CLOSED_POSITION_NAMESPACE, f"{quote.asset_id}:{closing.id}"),
            asset_id=quote.asset_id,
            asset=quote,
            # Buy quantity equals sell quantity within tolerance
            total_quantity=total_buy_qty,
            avg_cost_price=safe_divide(total_buy_cost, total_buy_qty),
            avg_sale_price=safe_divide(total_sell_revenue, total_sell_qty),
            closed_date=closing.timestamp,
            cycle_transactions=tuple(cycle),
        )


# =============================================================================
# CLOSED POSITION GROUP AGGREGATOR
# =============================================================================

class ClosedPositionGroupAggregator:
    """
    Rolls the closed positions of one asset into a ClosedPositionGroup.

    Percentage uses aggregate revenue over aggregate invested capital:
        total_pct = (Σ revenue / Σ invested - 1) × 100
    """

    def aggregate(
            self,
            closed_positions: Sequence[ClosedPosition],
    ) -> ClosedPositionGroup | None:
        """
        Aggregate closed positions that all belong to the same asset.

        Returns:
            ClosedPositionGroup, or None for an empty input
        """
        if not closed_positions:
            return None

        # Most recent cycle first within the group
        ordered = sorted(
            closed_positions, key=lambda p: p.closed_date, reverse=True
        )
        first = ordered[0]

        total_invested = decimal_sum(p.invested for p in ordered)
        total_revenue = decimal_sum(p.revenue for p in ordered)

        return ClosedPositionGroup(
            asset_id=first.asset_id,
            asset=first.asset,
            cycle_count=len(ordered),
            total_realized_pnl=decimal_sum(p.realized_pnl for p in ordered),
            total_realized_pnl_percentage=percentage_change(total_revenue, total_invested),
            most_recent_close_date=first.closed_date,
            total_invested=total_invested,
            total_revenue=total_revenue,
            closed_positions=tuple(ordered),
        )

    def group(
            self,
            closed_positions: Iterable[ClosedPosition],
    ) -> list[ClosedPositionGroup]:
        """
        Group closed positions by asset.

        Returns:
            Groups sorted by most recent close date (most recent first)
        """
        by_asset: dict[str, list[ClosedPosition]] = defaultdict(list)
        for position in closed_positions:
            by_asset[position.asset_id].append(position)

        groups = [
            group
            for group in (self.aggregate(positions) for positions in by_asset.values())
            if group is not None
        ]

        return sorted(
            groups,
            key=lambda g: (g.most_recent_close_date, g.asset_id),
            reverse=True,
        )


# =============================================================================
# PARTIAL REALIZED GAINS CALCULATOR
# =============================================================================

class PartialRealizedGainsCalculator:
    """
    Gains already locked in by sells that reduced, but did not close, a position.

    For every SELL in an open remainder:
        gain = (sell.unit_price - avg_cost) × sell.quantity

    avg_cost is the buy-only weighted average of the same remainder (as in
    HoldingsCalculator). The result is separate from, and additive to, the
    realized P&L of closed cycles.
    """

    def calculate(self, open_remainder: Sequence[Transaction]) -> Decimal:
        """Partial realized gains for one asset's open remainder."""
        if not open_remainder:
            return ZERO

        avg_cost = weighted_average_cost(open_remainder)

        gains = ZERO
        for txn in open_remainder:
            if txn.is_sell:
                gains += (txn.unit_price - avg_cost) * txn.quantity
        return gains

    def calculate_total(
            self,
            open_remainders: Mapping[str, Sequence[Transaction]],
    ) -> Decimal:
        """Partial realized gains summed across assets (keyed by asset_id)."""
        return decimal_sum(
            self.calculate(remainder) for remainder in open_remainders.values()
        )


# =============================================================================
# PORTFOLIO SUMMARY AGGREGATOR
# =============================================================================

class PortfolioSummaryAggregator:
    """
    Produces portfolio-wide totals from holdings and closed positions.

    Formulas:
        total_value       = Σ holding.current_value
        unrealized_pnl    = Σ holding.profit_loss
        total_open_cost   = Σ holding.total_quantity × holding.avg_cost
        realized_pnl      = Σ closed.realized_pnl (+ partial realized gains)
        total_closed_cost = Σ closed.avg_cost_price × closed.total_quantity
    """

    def aggregate(
            self,
            holdings: Iterable[Holding],
            closed_positions: Iterable[ClosedPosition],
            partial_realized_gains: Decimal = ZERO,
    ) -> PortfolioSummary:
        """
        Compute the portfolio summary.

        Args:
            holdings: Open positions
            closed_positions: Closed trading cycles
            partial_realized_gains: Gains from partial sells (0 to exclude)

        Returns:
            PortfolioSummary
        """
        holdings = list(holdings)
        closed_positions = list(closed_positions)

        return PortfolioSummary(
            total_value=decimal_sum(h.current_value for h in holdings),
            unrealized_pnl=decimal_sum(h.profit_loss for h in holdings),
            closed_realized_pnl=decimal_sum(p.realized_pnl for p in closed_positions),
            total_open_cost=decimal_sum(h.cost_basis for h in holdings),
            total_closed_cost=decimal_sum(p.invested for p in closed_positions),
            partial_realized_pnl=partial_realized_gains,
        )
