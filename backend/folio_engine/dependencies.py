# backend/folio_engine/dependencies.py
"""
FastAPI dependencies for Folio Engine.

Service Dependencies (Singletons):
    get_accounting_service: PortfolioAccountingService built from settings
    get_snapshot_recalculator: SnapshotRecalculator built from settings
    get_ledger_service: LedgerService stamped with the app version

Every service is stateless, so one instance per process is enough.

Usage:
    @router.post("/state")
    def compute_state(
        service: PortfolioAccountingService = Depends(get_accounting_service),
    ):
        ...
"""

import logging
from functools import lru_cache

from folio_engine.config import settings
from folio_engine.services.accounting import PortfolioAccountingService
from folio_engine.services.ledger import LedgerService
from folio_engine.services.refresh import SnapshotRecalculator

logger = logging.getLogger(__name__)


# =============================================================================
# SERVICE DEPENDENCIES (Singletons)
# =============================================================================
# @lru_cache returns the same instance on every call.
# Tests override these through app.dependency_overrides.

@lru_cache(maxsize=1)
def get_accounting_service() -> PortfolioAccountingService:
    logger.debug(
        f"Initializing PortfolioAccountingService "
        f"(tolerance={settings.zero_balance_tolerance})"
    )
    return PortfolioAccountingService(
        zero_balance_tolerance=settings.zero_balance_tolerance,
    )


@lru_cache(maxsize=1)
def get_snapshot_recalculator() -> SnapshotRecalculator:
    logger.debug("Initializing SnapshotRecalculator")
    return SnapshotRecalculator(
        max_holdings=settings.display_max_holdings,
        stale_after_minutes=settings.stale_after_minutes,
    )


@lru_cache(maxsize=1)
def get_ledger_service() -> LedgerService:
    logger.debug("Initializing LedgerService")
    return LedgerService(app_version=settings.app_version)
