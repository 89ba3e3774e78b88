# backend/tests/services/refresh/test_snapshot_recalculator.py
"""
Unit tests for SnapshotRecalculator.

The refresh path revalues a snapshot without the ledger, so every test
here builds snapshots by hand.
"""

from datetime import timedelta
from decimal import Decimal

import pytest

from folio_engine.services.refresh import (
    RefreshableHolding,
    RefreshSnapshot,
    SnapshotRecalculator,
)
from tests.conftest import BASE_TIME, quote, quotes_for


def holding(asset_id: str, quantity: str, avg_cost: str, symbol: str = "") -> RefreshableHolding:
    return RefreshableHolding(
        asset_id=asset_id,
        symbol=symbol or asset_id[:3],
        name=asset_id.title(),
        quantity=Decimal(quantity),
        avg_cost=Decimal(avg_cost),
    )


@pytest.fixture
def snapshot() -> RefreshSnapshot:
    """1 bitcoin at avg 45000, 6 ethereum at avg 2000, 24000 realized."""
    return RefreshSnapshot(
        holdings=(
            holding("bitcoin", "1", "45000", symbol="btc"),
            holding("ethereum", "6", "2000", symbol="eth"),
        ),
        realized_pnl=Decimal("24000"),
    )


@pytest.fixture
def recalculator() -> SnapshotRecalculator:
    return SnapshotRecalculator()


class TestRecalculate:
    """Tests for the revaluation formulas."""

    def test_full_price_map(self, recalculator, snapshot):
        quotes = quotes_for(quote("bitcoin", "48000"), quote("ethereum", "2500"))

        display = recalculator.recalculate(snapshot, quotes, as_of=BASE_TIME)

        assert display.total_value == Decimal("63000")
        assert display.unrealized_pnl == Decimal("6000")
        assert display.realized_pnl == Decimal("24000")
        assert display.total_pnl == Decimal("30000")
        assert display.last_updated == BASE_TIME

    def test_holding_values(self, recalculator, snapshot):
        quotes = quotes_for(quote("bitcoin", "48000"), quote("ethereum", "2500"))

        display = recalculator.recalculate(snapshot, quotes, as_of=BASE_TIME)

        eth = next(h for h in display.holdings if h.asset_id == "ethereum")
        assert eth.current_value == Decimal("15000")
        assert eth.pnl_amount == Decimal("3000")
        assert eth.pnl_percentage == Decimal("25")

    def test_partial_price_map_skips_missing_assets(self, recalculator, snapshot):
        """Only bitcoin priced: one holding, totals cover bitcoin only."""
        display = recalculator.recalculate(
            snapshot, quotes_for(quote("bitcoin", "48000")), as_of=BASE_TIME
        )

        assert [h.asset_id for h in display.holdings] == ["bitcoin"]
        assert display.total_value == Decimal("48000")
        assert display.unrealized_pnl == Decimal("3000")
        assert display.realized_pnl == Decimal("24000")
        assert display.total_pnl == Decimal("27000")

    def test_empty_price_map(self, recalculator, snapshot):
        display = recalculator.recalculate(snapshot, {}, as_of=BASE_TIME)

        assert display.holdings == ()
        assert display.total_value == Decimal("0")
        assert display.total_pnl == Decimal("24000")

    def test_realized_pnl_is_carried_forward(self, recalculator, snapshot):
        """Price moves never change realized P&L."""
        low = recalculator.recalculate(
            snapshot, quotes_for(quote("bitcoin", "1")), as_of=BASE_TIME
        )
        high = recalculator.recalculate(
            snapshot, quotes_for(quote("bitcoin", "100000")), as_of=BASE_TIME
        )

        assert low.realized_pnl == high.realized_pnl == snapshot.realized_pnl

    def test_zero_cost_basis_has_zero_percentage(self, recalculator):
        snapshot = RefreshSnapshot(holdings=(holding("dust", "100", "0"),), realized_pnl=Decimal("0"))

        display = recalculator.recalculate(
            snapshot, quotes_for(quote("dust", "0.5")), as_of=BASE_TIME
        )

        assert display.holdings[0].pnl_amount == Decimal("50")
        assert display.holdings[0].pnl_percentage == Decimal("0")

    def test_zero_price(self, recalculator):
        snapshot = RefreshSnapshot(holdings=(holding("x", "2", "10"),), realized_pnl=Decimal("0"))

        display = recalculator.recalculate(snapshot, quotes_for(quote("x", "0")), as_of=BASE_TIME)

        assert display.total_value == Decimal("0")
        assert display.holdings[0].pnl_amount == Decimal("-20")
        assert display.holdings[0].pnl_percentage == Decimal("-100")

    def test_symbol_is_upper_cased(self, recalculator, snapshot):
        display = recalculator.recalculate(
            snapshot, quotes_for(quote("bitcoin", "48000")), as_of=BASE_TIME
        )

        assert display.holdings[0].symbol == "BTC"

    def test_empty_snapshot(self, recalculator):
        display = recalculator.recalculate(RefreshSnapshot.empty(), {}, as_of=BASE_TIME)

        assert display.is_empty
        assert display.total_pnl == Decimal("0")


class TestTopHoldings:
    """The display keeps the five most valuable holdings."""

    @pytest.fixture
    def seven_holdings(self) -> RefreshSnapshot:
        return RefreshSnapshot(
            holdings=tuple(holding(f"asset{i}", "1", "1") for i in range(1, 8)),
            realized_pnl=Decimal("0"),
        )

    def test_keeps_top_five_by_value(self, recalculator, seven_holdings):
        quotes = quotes_for(*(quote(f"asset{i}", str(i * 10)) for i in range(1, 8)))

        display = recalculator.recalculate(seven_holdings, quotes, as_of=BASE_TIME)

        assert [h.asset_id for h in display.holdings] == [
            "asset7", "asset6", "asset5", "asset4", "asset3",
        ]

    def test_totals_cover_all_holdings(self, recalculator, seven_holdings):
        """10 + 20 + ... + 70 = 280, not just the displayed 250."""
        quotes = quotes_for(*(quote(f"asset{i}", str(i * 10)) for i in range(1, 8)))

        display = recalculator.recalculate(seven_holdings, quotes, as_of=BASE_TIME)

        assert display.total_value == Decimal("280")
        assert display.unrealized_pnl == Decimal("273")

    def test_custom_limit(self, seven_holdings):
        quotes = quotes_for(*(quote(f"asset{i}", "5") for i in range(1, 8)))

        display = SnapshotRecalculator(max_holdings=2).recalculate(
            seven_holdings, quotes, as_of=BASE_TIME
        )

        # Equal values fall back to asset id order
        assert [h.asset_id for h in display.holdings] == ["asset1", "asset2"]


class TestStaleness:
    """Tests for the age of a display aggregate."""

    def test_fresh_within_threshold(self, recalculator, snapshot):
        display = recalculator.recalculate(snapshot, {}, as_of=BASE_TIME)

        assert not display.is_stale(BASE_TIME + timedelta(minutes=60))
        assert display.minutes_since_update(BASE_TIME + timedelta(minutes=60)) == 60

    def test_stale_after_threshold(self, recalculator, snapshot):
        display = recalculator.recalculate(snapshot, {}, as_of=BASE_TIME)

        assert display.is_stale(BASE_TIME + timedelta(minutes=61))
        assert display.minutes_since_update(BASE_TIME + timedelta(minutes=90, seconds=30)) == 90

    def test_custom_threshold(self, snapshot):
        display = SnapshotRecalculator(stale_after_minutes=5).recalculate(
            snapshot, {}, as_of=BASE_TIME
        )

        assert display.is_stale(BASE_TIME + timedelta(minutes=6))
