# backend/folio_engine/services/refresh/__init__.py
"""
Refresh path: revalue a reduced snapshot with fresh prices.

Components:
    - SnapshotRecalculator: snapshot + prices -> PortfolioDisplay
    - transformer.build_refresh_snapshot / build_display: PortfolioState
      projections (import from the module; it depends on the accounting engine)
    - encode_* / decode_*: versioned JSON for the shared storage boundary
"""

from folio_engine.services.refresh.codec import (
    decode_display,
    decode_snapshot,
    display_to_schema,
    encode_display,
    encode_snapshot,
    snapshot_from_schema,
    snapshot_to_schema,
)
from folio_engine.services.refresh.recalculator import SnapshotRecalculator, top_holdings
from folio_engine.services.refresh.types import (
    DisplayHolding,
    PortfolioDisplay,
    RefreshableHolding,
    RefreshSnapshot,
)

__all__ = [
    "DisplayHolding",
    "PortfolioDisplay",
    "RefreshableHolding",
    "RefreshSnapshot",
    "SnapshotRecalculator",
    "decode_display",
    "decode_snapshot",
    "display_to_schema",
    "encode_display",
    "encode_snapshot",
    "snapshot_from_schema",
    "snapshot_to_schema",
    "top_holdings",
]
