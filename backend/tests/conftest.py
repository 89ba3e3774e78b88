# backend/tests/conftest.py
"""
Pytest configuration and fixtures.

This module provides shared fixtures for all tests:
- Environment defaults (test mode) set before any app import
- Transaction and quote factories
- Sample ledgers used across engine, refresh and API tests
"""

import os

os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from folio_engine.models import AssetQuote, Transaction, TransactionType

# Day 1 of every sample ledger
BASE_TIME = datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)


# =============================================================================
# FACTORIES (importable: from tests.conftest import buy, sell, quote)
# =============================================================================

def make_txn(
        asset_id: str,
        transaction_type: TransactionType,
        quantity: str | Decimal,
        unit_price: str | Decimal,
        day: int = 1,
        txn_id: uuid.UUID | None = None,
        timestamp: datetime | None = None,
        notes: str | None = None,
) -> Transaction:
    """Build a Transaction; `day` counts from BASE_TIME (day 1 = BASE_TIME)."""
    return Transaction(
        id=txn_id or uuid.uuid4(),
        asset_id=asset_id,
        transaction_type=transaction_type,
        quantity=Decimal(quantity),
        unit_price=Decimal(unit_price),
        timestamp=timestamp or BASE_TIME + timedelta(days=day - 1),
        notes=notes,
    )


def buy(asset_id: str, quantity, unit_price, day: int = 1, **kwargs) -> Transaction:
    return make_txn(asset_id, TransactionType.BUY, quantity, unit_price, day, **kwargs)


def sell(asset_id: str, quantity, unit_price, day: int = 1, **kwargs) -> Transaction:
    return make_txn(asset_id, TransactionType.SELL, quantity, unit_price, day, **kwargs)


def quote(asset_id: str, price, symbol: str = "", name: str = "") -> AssetQuote:
    return AssetQuote(
        asset_id=asset_id,
        current_price=Decimal(price),
        symbol=symbol or asset_id[:3],
        name=name or asset_id.title(),
    )


def quotes_for(*items: AssetQuote) -> dict[str, AssetQuote]:
    return {q.asset_id: q for q in items}


def txn_payload(txn: Transaction) -> dict:
    """JSON body for one transaction, decimals as strings."""
    return {
        "id": str(txn.id),
        "asset_id": txn.asset_id,
        "transaction_type": txn.transaction_type.value,
        "quantity": str(txn.quantity),
        "unit_price": str(txn.unit_price),
        "timestamp": txn.timestamp.isoformat(),
        "notes": txn.notes,
    }


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def client():
    """
    TestClient for the API with rate limits reset per test.

    The app is imported lazily so pure engine tests never configure logging
    or build the FastAPI application.
    """
    from fastapi.testclient import TestClient

    from folio_engine.main import app
    from folio_engine.middleware import limiter

    limiter.reset()
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def btc_quote() -> AssetQuote:
    """Bitcoin at 48000."""
    return quote("bitcoin", "48000", symbol="btc", name="Bitcoin")


@pytest.fixture
def eth_quote() -> AssetQuote:
    """Ethereum at 2500."""
    return quote("ethereum", "2500", symbol="eth", name="Ethereum")


@pytest.fixture
def btc_round_trip_ledger() -> list[Transaction]:
    """
    Buy 2@40000 (day 1), Sell 2@50000 (day 3), Buy 1@45000 (day 5).

    One closed cycle (realized 20000) and one open unit.
    """
    return [
        buy("bitcoin", "2", "40000", day=1),
        sell("bitcoin", "2", "50000", day=3),
        buy("bitcoin", "1", "45000", day=5),
    ]


@pytest.fixture
def mixed_ledger() -> list[Transaction]:
    """
    Two assets:
    - bitcoin: closed cycle (+20000) then 1 unit open at 45000
    - ethereum: 10 bought at 2000, 4 sold at 3000 (partial gain 4000), 6 open
    """
    return [
        buy("bitcoin", "2", "40000", day=1),
        buy("ethereum", "10", "2000", day=2),
        sell("bitcoin", "2", "50000", day=3),
        sell("ethereum", "4", "3000", day=4),
        buy("bitcoin", "1", "45000", day=5),
    ]
