# backend/folio_engine/services/refresh/codec.py
"""
Versioned JSON encoding for the refresh boundary.

The full engine and the refresh process exchange two records through
shared storage: the RefreshSnapshot and the PortfolioDisplay. Each payload
carries a schema_version; a reader refuses versions it does not know
instead of guessing at field meanings.

Decimals are written as strings (pydantic's JSON mode), so values like
0.00000001 round-trip exactly. JSON numbers in a payload are read as
Decimal, never float.

Usage:
    payload = encode_snapshot(snapshot)
    snapshot = decode_snapshot(payload)
"""

from __future__ import annotations

import json
import logging
from decimal import Decimal
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from folio_engine.schemas.refresh import (
    DisplayHoldingSchema,
    PortfolioDisplaySchema,
    RefreshableHoldingSchema,
    RefreshSnapshotSchema,
)
from folio_engine.services.constants import REFRESH_SCHEMA_VERSION
from folio_engine.services.exceptions import (
    SnapshotDecodeError,
    UnsupportedSchemaVersionError,
)
from folio_engine.services.refresh.types import (
    DisplayHolding,
    PortfolioDisplay,
    RefreshableHolding,
    RefreshSnapshot,
)

logger = logging.getLogger(__name__)

SNAPSHOT = "snapshot"
DISPLAY = "display"


# =============================================================================
# DOMAIN <-> SCHEMA
# =============================================================================

def snapshot_to_schema(snapshot: RefreshSnapshot) -> RefreshSnapshotSchema:
    return RefreshSnapshotSchema(
        schema_version=snapshot.schema_version,
        holdings=[
            RefreshableHoldingSchema.model_validate(h) for h in snapshot.holdings
        ],
        realized_pnl=snapshot.realized_pnl,
        generated_at=snapshot.generated_at,
    )


def snapshot_from_schema(schema: RefreshSnapshotSchema) -> RefreshSnapshot:
    return RefreshSnapshot(
        holdings=tuple(
            RefreshableHolding(
                asset_id=h.asset_id,
                symbol=h.symbol,
                name=h.name,
                quantity=h.quantity,
                avg_cost=h.avg_cost,
            )
            for h in schema.holdings
        ),
        realized_pnl=schema.realized_pnl,
        generated_at=schema.generated_at,
        schema_version=schema.schema_version,
    )


def display_to_schema(display: PortfolioDisplay) -> PortfolioDisplaySchema:
    return PortfolioDisplaySchema(
        schema_version=display.schema_version,
        total_value=display.total_value,
        unrealized_pnl=display.unrealized_pnl,
        realized_pnl=display.realized_pnl,
        total_pnl=display.total_pnl,
        holdings=[DisplayHoldingSchema.model_validate(h) for h in display.holdings],
        last_updated=display.last_updated,
    )


def display_from_schema(schema: PortfolioDisplaySchema) -> PortfolioDisplay:
    return PortfolioDisplay(
        total_value=schema.total_value,
        unrealized_pnl=schema.unrealized_pnl,
        realized_pnl=schema.realized_pnl,
        total_pnl=schema.total_pnl,
        holdings=tuple(
            DisplayHolding(
                asset_id=h.asset_id,
                symbol=h.symbol,
                name=h.name,
                current_value=h.current_value,
                pnl_amount=h.pnl_amount,
                pnl_percentage=h.pnl_percentage,
            )
            for h in schema.holdings
        ),
        last_updated=schema.last_updated,
        schema_version=schema.schema_version,
    )


# =============================================================================
# ENCODE / DECODE
# =============================================================================

def _load_versioned(kind: str, payload: bytes | str) -> dict[str, Any]:
    """Parse JSON and check schema_version before any field validation."""
    try:
        data = json.loads(payload, parse_float=Decimal)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise SnapshotDecodeError(kind, f"not valid JSON ({e})") from e

    if not isinstance(data, dict):
        raise SnapshotDecodeError(kind, "expected a JSON object")

    version = data.get("schema_version")
    if version is None:
        raise SnapshotDecodeError(kind, "missing schema_version")
    if not isinstance(version, int) or isinstance(version, bool):
        raise SnapshotDecodeError(kind, f"schema_version must be an integer, got {version!r}")
    if version != REFRESH_SCHEMA_VERSION:
        raise UnsupportedSchemaVersionError(kind, version, REFRESH_SCHEMA_VERSION)

    return data


def _describe(error: PydanticValidationError) -> str:
    first = error.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    return f"{location}: {first.get('msg', 'invalid value')}"


def encode_snapshot(snapshot: RefreshSnapshot) -> bytes:
    return snapshot_to_schema(snapshot).model_dump_json().encode("utf-8")


def decode_snapshot(payload: bytes | str) -> RefreshSnapshot:
    """
    Decode a serialized RefreshSnapshot.

    Raises:
        UnsupportedSchemaVersionError: If the payload's schema_version is unknown
        SnapshotDecodeError: If the payload is malformed
    """
    data = _load_versioned(SNAPSHOT, payload)
    try:
        schema = RefreshSnapshotSchema.model_validate(data)
    except PydanticValidationError as e:
        logger.warning(f"Rejected snapshot payload: {_describe(e)}")
        raise SnapshotDecodeError(SNAPSHOT, _describe(e)) from e
    return snapshot_from_schema(schema)


def encode_display(display: PortfolioDisplay) -> bytes:
    return display_to_schema(display).model_dump_json().encode("utf-8")


def decode_display(payload: bytes | str) -> PortfolioDisplay:
    """
    Decode a serialized PortfolioDisplay.

    Raises:
        UnsupportedSchemaVersionError: If the payload's schema_version is unknown
        SnapshotDecodeError: If the payload is malformed
    """
    data = _load_versioned(DISPLAY, payload)
    try:
        schema = PortfolioDisplaySchema.model_validate(data)
    except PydanticValidationError as e:
        logger.warning(f"Rejected display payload: {_describe(e)}")
        raise SnapshotDecodeError(DISPLAY, _describe(e)) from e
    return display_from_schema(schema)
