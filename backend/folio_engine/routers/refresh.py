# backend/folio_engine/routers/refresh.py
"""
Refresh endpoints.

- POST /refresh/recalculate - Revalue a snapshot with fresh prices

Mirrors what the constrained refresh process does: it never sees the
ledger, only the snapshot and a (possibly partial) price map.
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request

from folio_engine.dependencies import get_snapshot_recalculator
from folio_engine.middleware.rate_limit import RATE_LIMIT_COMPUTE, limiter
from folio_engine.models import AssetQuote
from folio_engine.schemas.refresh import RecalculateRequest, RecalculateResponse
from folio_engine.services.constants import REFRESH_SCHEMA_VERSION
from folio_engine.services.exceptions import UnsupportedSchemaVersionError
from folio_engine.services.refresh import (
    SnapshotRecalculator,
    display_to_schema,
    snapshot_from_schema,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/refresh",
    tags=["Refresh"],
)


@router.post(
    "/recalculate",
    response_model=RecalculateResponse,
    summary="Recalculate display from snapshot",
    response_description="Display aggregate at the supplied prices",
)
@limiter.limit(RATE_LIMIT_COMPUTE)
def recalculate_snapshot(
        request: Request,
        body: RecalculateRequest,
        recalculator: SnapshotRecalculator = Depends(get_snapshot_recalculator),
) -> RecalculateResponse:
    """
    Revalue a refresh snapshot.

    Holdings without a price are left out of both the holdings list and the
    totals and are listed in `missing_prices`. `realized_pnl` is carried
    over from the snapshot unchanged.

    Raises **400** if the snapshot carries an unknown `schema_version`.
    """
    if body.snapshot.schema_version != REFRESH_SCHEMA_VERSION:
        raise UnsupportedSchemaVersionError(
            "snapshot", body.snapshot.schema_version, REFRESH_SCHEMA_VERSION
        )

    snapshot = snapshot_from_schema(body.snapshot)
    quotes = {
        asset_id: AssetQuote(asset_id=asset_id, current_price=price.current_price)
        for asset_id, price in body.prices.items()
    }

    now = datetime.now(timezone.utc)
    as_of = body.as_of or now

    display = recalculator.recalculate(snapshot, quotes, as_of=as_of)

    return RecalculateResponse(
        display=display_to_schema(display),
        is_stale=display.is_stale(now),
        minutes_since_update=display.minutes_since_update(now),
        missing_prices=[a for a in snapshot.asset_ids if a not in quotes],
    )
