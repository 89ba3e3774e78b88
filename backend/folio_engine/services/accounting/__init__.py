# backend/folio_engine/services/accounting/__init__.py
"""
Accounting Engine Package.

Turns an append-only ledger of buy/sell transactions into derived portfolio
state, recomputed from scratch on every call.

Usage:
    from folio_engine.services.accounting import PortfolioAccountingService

    service = PortfolioAccountingService()
    state = service.compute(transactions, quotes)

    state.holdings                 # open positions, highest value first
    state.closed_positions         # completed cycles, most recent first
    state.closed_position_groups   # cycles rolled up per asset
    state.summary.total_pnl        # unrealized + realized

Architecture:
    accounting/
    ├── __init__.py      # This file - package exports
    ├── types.py         # Internal data classes
    ├── cycles.py        # Zero-crossing cycle detection
    ├── calculators.py   # Holdings / closed position / summary calculators
    └── service.py       # PortfolioAccountingService (orchestrator)

Data Flow:
    Transactions → grouped by asset → CycleDetector
    Closed cycles → ClosedPositionAggregator → ClosedPositionGroupAggregator
    Open remainder + price → HoldingsCalculator → Holding
    Open remainder → PartialRealizedGainsCalculator
    Holdings + ClosedPositions → PortfolioSummaryAggregator → PortfolioSummary
"""

from folio_engine.services.accounting.calculators import (
    ClosedPositionAggregator,
    ClosedPositionGroupAggregator,
    HoldingsCalculator,
    PartialRealizedGainsCalculator,
    PortfolioSummaryAggregator,
    weighted_average_cost,
)
from folio_engine.services.accounting.cycles import CycleDetector, sort_chronologically
from folio_engine.services.accounting.service import PortfolioAccountingService
from folio_engine.services.accounting.types import (
    ClosedPosition,
    ClosedPositionGroup,
    CycleSplit,
    Holding,
    OpenPosition,
    PortfolioState,
    PortfolioSummary,
)

__all__ = [
    # Main service
    "PortfolioAccountingService",

    # Data types
    "CycleSplit",
    "OpenPosition",
    "Holding",
    "ClosedPosition",
    "ClosedPositionGroup",
    "PortfolioSummary",
    "PortfolioState",

    # Calculators (for testing)
    "CycleDetector",
    "HoldingsCalculator",
    "ClosedPositionAggregator",
    "ClosedPositionGroupAggregator",
    "PartialRealizedGainsCalculator",
    "PortfolioSummaryAggregator",
    "sort_chronologically",
    "weighted_average_cost",
]
