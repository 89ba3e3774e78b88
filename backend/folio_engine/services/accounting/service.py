# backend/folio_engine/services/accounting/service.py
"""
Portfolio Accounting Service - orchestrator for the accounting engine.

Single entry point turning a ledger and a price snapshot into derived state:
- compute(): holdings, closed positions, groups, partial gains, summary

Design Principles:
- Recompute from scratch: every call starts from the full ledger, nothing
  is patched incrementally
- Pure: no I/O, no shared mutable state; safe to call concurrently
- No HTTP Knowledge: never raises on financial inputs, reports warnings
- Composable: delegates to the specialized calculators

Usage:
    from folio_engine.services.accounting import PortfolioAccountingService

    service = PortfolioAccountingService()
    state = service.compute(transactions, quotes)
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Iterable, Mapping
from decimal import Decimal

from folio_engine.models import AssetQuote, Transaction
from folio_engine.services.accounting.calculators import (
    ClosedPositionAggregator,
    ClosedPositionGroupAggregator,
    HoldingsCalculator,
    PartialRealizedGainsCalculator,
    PortfolioSummaryAggregator,
)
from folio_engine.services.accounting.cycles import CycleDetector
from folio_engine.services.accounting.types import (
    ClosedPosition,
    Holding,
    PortfolioState,
)
from folio_engine.services.constants import ZERO, ZERO_BALANCE_TOLERANCE

logger = logging.getLogger(__name__)


def group_by_asset(
        transactions: Iterable[Transaction],
) -> dict[str, list[Transaction]]:
    """Group transactions by asset_id, keeping input order within each group."""
    grouped: dict[str, list[Transaction]] = defaultdict(list)
    for txn in transactions:
        grouped[txn.asset_id].append(txn)
    return dict(grouped)


class PortfolioAccountingService:
    """
    Main service for portfolio accounting.

    Attributes:
        _cycle_detector: Splits each asset's ledger into cycles
        _holdings_calc: Open remainder -> Holding
        _closed_calc: Closed cycle -> ClosedPosition
        _group_calc: ClosedPositions -> ClosedPositionGroups
        _partial_calc: Partial realized gains
        _summary_calc: Portfolio-wide totals
    """

    def __init__(self, zero_balance_tolerance: Decimal = ZERO_BALANCE_TOLERANCE) -> None:
        """
        Initialize the accounting service.

        Args:
            zero_balance_tolerance: Epsilon for cycle detection
        """
        self._cycle_detector = CycleDetector(tolerance=zero_balance_tolerance)
        self._holdings_calc = HoldingsCalculator()
        self._closed_calc = ClosedPositionAggregator()
        self._group_calc = ClosedPositionGroupAggregator()
        self._partial_calc = PartialRealizedGainsCalculator()
        self._summary_calc = PortfolioSummaryAggregator()

    # =========================================================================
    # PUBLIC API
    # =========================================================================

    def compute(
            self,
            transactions: Iterable[Transaction],
            quotes: Mapping[str, AssetQuote],
    ) -> PortfolioState:
        """
        Compute the complete derived state of a portfolio.

        Args:
            transactions: The full ledger, any order, any assets
            quotes: Current asset snapshots keyed by asset_id

        Returns:
            PortfolioState. Assets missing from quotes are skipped with a warning.
        """
        grouped = group_by_asset(transactions)

        holdings: list[Holding] = []
        closed_positions: list[ClosedPosition] = []
        partial_gains = ZERO
        warnings: list[str] = []

        for asset_id in sorted(grouped):
            quote = quotes.get(asset_id)
            if quote is None:
                message = f"No price data for {asset_id}, skipping"
                logger.warning(message)
                warnings.append(message)
                continue

            split = self._cycle_detector.split(asset_id, grouped[asset_id])
            warnings.extend(split.warnings)

            # Closed cycles
            for cycle in split.closed_cycles:
                position = self._closed_calc.aggregate(cycle, quote)
                if position is None:
                    warnings.append(
                        f"Discarded invalid cycle for {asset_id} "
                        f"closed by transaction {cycle[-1].id}"
                    )
                    continue
                closed_positions.append(position)

            # Open remainder
            holding = self._holdings_calc.calculate(split.open_remainder, quote)
            if holding is not None:
                holdings.append(holding)
            partial_gains += self._partial_calc.calculate(split.open_remainder)

        holdings.sort(key=lambda h: (-h.current_value, h.asset_id))
        closed_positions.sort(key=lambda p: (p.closed_date, p.asset_id), reverse=True)
        groups = self._group_calc.group(closed_positions)

        summary = self._summary_calc.aggregate(
            holdings=holdings,
            closed_positions=closed_positions,
            partial_realized_gains=partial_gains,
        )

        logger.info(
            f"Computed portfolio: {len(holdings)} holdings, "
            f"{len(closed_positions)} closed positions from {len(grouped)} assets"
        )

        return PortfolioState(
            holdings=tuple(holdings),
            closed_positions=tuple(closed_positions),
            closed_position_groups=tuple(groups),
            partial_realized_gains=partial_gains,
            summary=summary,
            warnings=tuple(warnings),
        )

    def compute_holdings(
            self,
            transactions: Iterable[Transaction],
            quotes: Mapping[str, AssetQuote],
    ) -> list[Holding]:
        """Open positions only, highest value first."""
        return list(self.compute(transactions, quotes).holdings)
