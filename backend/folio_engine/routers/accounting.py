# backend/folio_engine/routers/accounting.py
"""
Portfolio accounting endpoints.

Stateless: the client sends the whole ledger and current quotes, the
engine recomputes everything from scratch.

- POST /portfolio/state            - Holdings, closed positions, summary
- POST /portfolio/refresh-snapshot - Snapshot for the refresh process + display
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request

from folio_engine.config import settings
from folio_engine.dependencies import get_accounting_service
from folio_engine.middleware.rate_limit import RATE_LIMIT_COMPUTE, limiter
from folio_engine.models import AssetQuote
from folio_engine.schemas.accounting import (
    AssetInfo,
    ClosedPositionGroupResponse,
    ClosedPositionResponse,
    HoldingResponse,
    PortfolioComputeRequest,
    PortfolioRefreshResponse,
    PortfolioStateResponse,
    PortfolioSummaryResponse,
)
from folio_engine.schemas.transactions import TransactionOut
from folio_engine.services.accounting import (
    ClosedPosition,
    ClosedPositionGroup,
    Holding,
    PortfolioAccountingService,
    PortfolioState,
    PortfolioSummary,
)
from folio_engine.services.refresh import display_to_schema, snapshot_to_schema
from folio_engine.services.refresh.transformer import build_display, build_refresh_snapshot

# =============================================================================
# ROUTER SETUP
# =============================================================================

router = APIRouter(
    prefix="/portfolio",
    tags=["Portfolio"],
)


# =============================================================================
# MAPPER FUNCTIONS (Internal Types -> Pydantic Schemas)
# =============================================================================

def _map_asset(asset: AssetQuote) -> AssetInfo:
    return AssetInfo(
        asset_id=asset.asset_id,
        symbol=asset.symbol,
        name=asset.name,
        current_price=asset.current_price,
    )


def _map_holding(holding: Holding) -> HoldingResponse:
    return HoldingResponse(
        asset=_map_asset(holding.asset),
        total_quantity=holding.total_quantity,
        avg_cost=holding.avg_cost,
        cost_basis=holding.cost_basis,
        current_value=holding.current_value,
        profit_loss=holding.profit_loss,
        profit_loss_percentage=holding.profit_loss_percentage,
    )


def _map_closed_position(position: ClosedPosition) -> ClosedPositionResponse:
    return ClosedPositionResponse(
        id=str(position.id),
        asset=_map_asset(position.asset),
        total_quantity=position.total_quantity,
        avg_cost_price=position.avg_cost_price,
        avg_sale_price=position.avg_sale_price,
        closed_date=position.closed_date,
        realized_pnl=position.realized_pnl,
        realized_pnl_percentage=position.realized_pnl_percentage,
        cycle_transactions=[
            TransactionOut.model_validate(txn) for txn in position.cycle_transactions
        ],
    )


def _map_group(group: ClosedPositionGroup) -> ClosedPositionGroupResponse:
    return ClosedPositionGroupResponse(
        asset=_map_asset(group.asset),
        cycle_count=group.cycle_count,
        total_realized_pnl=group.total_realized_pnl,
        total_realized_pnl_percentage=group.total_realized_pnl_percentage,
        most_recent_close_date=group.most_recent_close_date,
        total_invested=group.total_invested,
        total_revenue=group.total_revenue,
        closed_positions=[_map_closed_position(p) for p in group.closed_positions],
    )


def _map_summary(summary: PortfolioSummary) -> PortfolioSummaryResponse:
    return PortfolioSummaryResponse(
        total_value=summary.total_value,
        unrealized_pnl=summary.unrealized_pnl,
        realized_pnl=summary.realized_pnl,
        closed_realized_pnl=summary.closed_realized_pnl,
        partial_realized_pnl=summary.partial_realized_pnl,
        total_pnl=summary.total_pnl,
        total_pnl_percentage=summary.total_pnl_percentage,
        total_open_cost=summary.total_open_cost,
        total_closed_cost=summary.total_closed_cost,
    )


def _map_state(state: PortfolioState) -> PortfolioStateResponse:
    return PortfolioStateResponse(
        holdings=[_map_holding(h) for h in state.holdings],
        closed_positions=[_map_closed_position(p) for p in state.closed_positions],
        closed_position_groups=[_map_group(g) for g in state.closed_position_groups],
        partial_realized_gains=state.partial_realized_gains,
        summary=_map_summary(state.summary),
        is_empty=state.is_empty,
        warnings=list(state.warnings),
    )


def _compute(
        body: PortfolioComputeRequest,
        service: PortfolioAccountingService,
) -> PortfolioState:
    transactions = [txn.to_domain() for txn in body.transactions]
    quotes = {q.asset_id: q.to_domain() for q in body.quotes}
    return service.compute(transactions, quotes)


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.post(
    "/state",
    response_model=PortfolioStateResponse,
    summary="Compute portfolio state",
    response_description="Holdings, closed positions and summary for the ledger",
)
@limiter.limit(RATE_LIMIT_COMPUTE)
def compute_portfolio_state(
        request: Request,
        body: PortfolioComputeRequest,
        service: PortfolioAccountingService = Depends(get_accounting_service),
) -> PortfolioStateResponse:
    """
    Recompute the full derived state of a portfolio.

    Returns:
    - **holdings**: open positions, highest current value first
    - **closed_positions**: one per completed buy-to-sell cycle, most recent first
    - **closed_position_groups**: closed cycles rolled up per asset
    - **partial_realized_gains**: gains locked in by sells that did not close a position
    - **summary**: total value, unrealized/realized/total P&L
    - **warnings**: data quality problems (oversells, missing prices)

    Assets without a quote are left out entirely and reported in `warnings`.
    """
    return _map_state(_compute(body, service))


@router.post(
    "/refresh-snapshot",
    response_model=PortfolioRefreshResponse,
    summary="Build refresh snapshot",
    response_description="Reduced snapshot plus the matching display aggregate",
)
@limiter.limit(RATE_LIMIT_COMPUTE)
def build_portfolio_refresh_snapshot(
        request: Request,
        body: PortfolioComputeRequest,
        service: PortfolioAccountingService = Depends(get_accounting_service),
) -> PortfolioRefreshResponse:
    """
    Project the portfolio onto the snapshot the refresh process consumes.

    The returned display equals what `/refresh/recalculate` produces for the
    returned snapshot at the same prices.
    """
    state = _compute(body, service)
    as_of = body.as_of or datetime.now(timezone.utc)

    snapshot = build_refresh_snapshot(state, generated_at=as_of)
    display = build_display(
        state,
        as_of=as_of,
        max_holdings=settings.display_max_holdings,
        stale_after_minutes=settings.stale_after_minutes,
    )

    return PortfolioRefreshResponse(
        snapshot=snapshot_to_schema(snapshot),
        display=display_to_schema(display),
        warnings=list(state.warnings),
    )
