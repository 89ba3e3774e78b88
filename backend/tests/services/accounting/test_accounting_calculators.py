# backend/tests/services/accounting/test_accounting_calculators.py
"""
Unit tests for accounting calculators.

These tests verify the pure calculation logic with hand-built ledgers.

Test Coverage:
- HoldingsCalculator: two-pass weighted average cost, net quantity
- ClosedPositionAggregator: realized P&L per cycle, validity gate
- ClosedPositionGroupAggregator: revenue-over-invested percentage
- PartialRealizedGainsCalculator: gains from sells inside open positions
- PortfolioSummaryAggregator: totals and total P&L percentage
"""

import uuid
from decimal import Decimal

import pytest

from folio_engine.services.accounting import (
    ClosedPositionAggregator,
    ClosedPositionGroupAggregator,
    HoldingsCalculator,
    PartialRealizedGainsCalculator,
    PortfolioSummaryAggregator,
    weighted_average_cost,
)
from folio_engine.services.accounting.calculators import CLOSED_POSITION_NAMESPACE
from tests.conftest import buy, quote, sell


# =============================================================================
# HOLDINGS CALCULATOR TESTS
# =============================================================================

class TestHoldingsCalculator:
    """Tests for HoldingsCalculator."""

    def test_weighted_average_cost_of_two_buys(self):
        """[Buy 1@100, Buy 1@200] averages to 150."""
        calc = HoldingsCalculator()
        remainder = [buy("x", "1", "100", day=1), buy("x", "1", "200", day=2)]

        holding = calc.calculate(remainder, quote("x", "180"))

        assert holding.avg_cost == Decimal("150")
        assert holding.total_quantity == Decimal("2")
        assert holding.current_value == Decimal("360")

    def test_sell_does_not_change_average_cost(self):
        """Selling 1@999 leaves the remaining unit at avg cost 150."""
        calc = HoldingsCalculator()
        remainder = [
            buy("x", "1", "100", day=1),
            buy("x", "1", "200", day=2),
            sell("x", "1", "999", day=3),
        ]

        holding = calc.calculate(remainder, quote("x", "180"))

        assert holding.total_quantity == Decimal("1")
        assert holding.avg_cost == Decimal("150")
        assert holding.cost_basis == Decimal("150")
        assert holding.profit_loss == Decimal("30")
        assert holding.profit_loss_percentage == Decimal("20")

    def test_remaining_cost_uses_average_not_sale_price(self):
        """Sells reduce remaining cost at avg_cost."""
        calc = HoldingsCalculator()
        remainder = [
            buy("x", "1", "100", day=1),
            buy("x", "1", "200", day=2),
            sell("x", "1", "999", day=3),
        ]

        position = calc.aggregate("x", remainder)

        assert position.total_bought_qty == Decimal("2")
        assert position.total_bought_cost == Decimal("300")
        assert position.total_sold_qty == Decimal("1")
        assert position.remaining_cost == Decimal("150")

    def test_no_holding_when_fully_sold(self):
        """Net quantity of zero yields no holding."""
        calc = HoldingsCalculator()
        remainder = [buy("x", "1", "100", day=1), sell("x", "1", "100", day=2)]

        assert calc.calculate(remainder, quote("x", "100")) is None

    def test_no_holding_when_oversold(self):
        """Net quantity below zero yields no holding."""
        calc = HoldingsCalculator()
        remainder = [buy("x", "1", "100", day=1), sell("x", "3", "100", day=2)]

        assert calc.calculate(remainder, quote("x", "100")) is None

    def test_no_holding_for_empty_remainder(self):
        calc = HoldingsCalculator()
        assert calc.calculate([], quote("x", "100")) is None

    def test_zero_cost_holding_has_zero_percentage(self):
        """avg_cost == 0 (airdrop) gives 0%, never a division error."""
        calc = HoldingsCalculator()
        holding = calc.calculate([buy("x", "5", "0")], quote("x", "10"))

        assert holding.avg_cost == Decimal("0")
        assert holding.profit_loss == Decimal("50")
        assert holding.profit_loss_percentage == Decimal("0")

    def test_holding_carries_quote(self):
        """The asset snapshot is attached for display."""
        q = quote("bitcoin", "48000", symbol="btc", name="Bitcoin")
        holding = HoldingsCalculator().calculate([buy("bitcoin", "1", "45000")], q)

        assert holding.asset is q
        assert holding.asset_id == "bitcoin"

    def test_tiny_quantities_keep_precision(self):
        """Satoshi-sized quantities are exact."""
        holding = HoldingsCalculator().calculate(
            [buy("bitcoin", "0.00000001", "40000")], quote("bitcoin", "50000")
        )

        assert holding.total_quantity == Decimal("0.00000001")
        assert holding.current_value == Decimal("0.00050000")

    def test_weighted_average_cost_ignores_sells(self):
        txns = [buy("x", "2", "10"), sell("x", "1", "1000"), buy("x", "2", "20")]
        assert weighted_average_cost(txns) == Decimal("15")

    def test_weighted_average_cost_without_buys(self):
        assert weighted_average_cost([sell("x", "1", "10")]) == Decimal("0")


# =============================================================================
# CLOSED POSITION AGGREGATOR TESTS
# =============================================================================

class TestClosedPositionAggregator:
    """Tests for ClosedPositionAggregator."""

    def test_simple_cycle_realized_pnl(self):
        """[Buy 1@100, Sell 1@150] realizes 50, i.e. 50%."""
        b = buy("x", "1", "100", day=1)
        s = sell("x", "1", "150", day=2)

        position = ClosedPositionAggregator().aggregate([b, s], quote("x", "120"))

        assert position.realized_pnl == Decimal("50")
        assert position.realized_pnl_percentage == Decimal("50")
        assert position.closed_date == s.timestamp
        assert position.cycle_transactions == (b, s)

    def test_cycle_averages(self, btc_round_trip_ledger, btc_quote):
        """Buy 2@40000, Sell 2@50000 realizes 20000."""
        cycle = btc_round_trip_ledger[:2]

        position = ClosedPositionAggregator().aggregate(cycle, btc_quote)

        assert position.total_quantity == Decimal("2")
        assert position.avg_cost_price == Decimal("40000")
        assert position.avg_sale_price == Decimal("50000")
        assert position.realized_pnl == Decimal("20000")
        assert position.realized_pnl_percentage == Decimal("25")
        assert position.invested == Decimal("80000")
        assert position.revenue == Decimal("100000")

    def test_multi_leg_cycle(self):
        """Averages are quantity-weighted across legs."""
        cycle = [
            buy("x", "1", "100", day=1),
            buy("x", "3", "200", day=2),
            sell("x", "2", "250", day=3),
            sell("x", "2", "150", day=4),
        ]

        position = ClosedPositionAggregator().aggregate(cycle, quote("x", "1"))

        assert position.avg_cost_price == Decimal("175")
        assert position.avg_sale_price == Decimal("200")
        assert position.realized_pnl == Decimal("100")

    def test_losing_cycle(self):
        cycle = [buy("x", "2", "100", day=1), sell("x", "2", "80", day=2)]

        position = ClosedPositionAggregator().aggregate(cycle, quote("x", "1"))

        assert position.realized_pnl == Decimal("-40")
        assert position.realized_pnl_percentage == Decimal("-20")

    def test_zero_cost_cycle_has_zero_percentage(self):
        cycle = [buy("x", "1", "0", day=1), sell("x", "1", "10", day=2)]

        position = ClosedPositionAggregator().aggregate(cycle, quote("x", "1"))

        assert position.realized_pnl == Decimal("10")
        assert position.realized_pnl_percentage == Decimal("0")

    def test_cycle_without_buys_is_discarded(self):
        cycle = [sell("x", "1", "100")]
        assert ClosedPositionAggregator().aggregate(cycle, quote("x", "1")) is None

    def test_cycle_without_sells_is_discarded(self):
        cycle = [buy("x", "1", "100")]
        assert ClosedPositionAggregator().aggregate(cycle, quote("x", "1")) is None

    def test_empty_cycle_is_discarded(self):
        assert ClosedPositionAggregator().aggregate([], quote("x", "1")) is None

    def test_id_is_deterministic(self):
        """Same closing transaction, same id."""
        closing_id = uuid.UUID(int=7)
        cycle = [buy("x", "1", "100", day=1), sell("x", "1", "150", day=2, txn_id=closing_id)]
        aggregator = ClosedPositionAggregator()

        first = aggregator.aggregate(cycle, quote("x", "1"))
        second = aggregator.aggregate(cycle, quote("x", "1"))

        assert first.id == second.id
        assert first.id == uuid.uuid5(CLOSED_POSITION_NAMESPACE, f"x:{closing_id}")

    def test_explicit_closing_transaction(self):
        """closed_date comes from the supplied closing transaction."""
        b = buy("x", "1", "100", day=1)
        s = sell("x", "1", "150", day=2)

        position = ClosedPositionAggregator().aggregate([b, s], quote("x", "1"), closing_transaction=s)

        assert position.closed_date == s.timestamp


# =============================================================================
# CLOSED POSITION GROUP AGGREGATOR TESTS
# =============================================================================

class TestClosedPositionGroupAggregator:
    """Tests for ClosedPositionGroupAggregator."""

    @pytest.fixture
    def two_cycles(self):
        """Small winning cycle then a large losing one."""
        aggregator = ClosedPositionAggregator()
        q = quote("x", "1")
        small = aggregator.aggregate(
            [buy("x", "1", "100", day=1), sell("x", "1", "200", day=2)], q
        )
        large = aggregator.aggregate(
            [buy("x", "10", "100", day=3), sell("x", "10", "90", day=4)], q
        )
        return small, large

    def test_group_totals(self, two_cycles):
        small, large = two_cycles

        group = ClosedPositionGroupAggregator().aggregate([small, large])

        assert group.cycle_count == 2
        assert group.total_realized_pnl == Decimal("0")
        assert group.total_invested == Decimal("1100")
        assert group.total_revenue == Decimal("1100")
        assert group.most_recent_close_date == large.closed_date

    def test_percentage_is_weighted_not_averaged(self, two_cycles):
        """+100% and -10% cycles give 0% overall, not the 45% mean."""
        group = ClosedPositionGroupAggregator().aggregate(list(two_cycles))

        assert group.total_realized_pnl_percentage == Decimal("0")

    def test_positions_sorted_most_recent_first(self, two_cycles):
        small, large = two_cycles

        group = ClosedPositionGroupAggregator().aggregate([small, large])

        assert group.closed_positions == (large, small)

    def test_empty_input(self):
        assert ClosedPositionGroupAggregator().aggregate([]) is None

    def test_group_by_asset_sorted_by_close_date(self):
        aggregator = ClosedPositionAggregator()
        old = aggregator.aggregate(
            [buy("a", "1", "1", day=1), sell("a", "1", "2", day=2)], quote("a", "1")
        )
        recent = aggregator.aggregate(
            [buy("b", "1", "1", day=3), sell("b", "1", "2", day=10)], quote("b", "1")
        )
        middle = aggregator.aggregate(
            [buy("a", "1", "1", day=4), sell("a", "1", "3", day=5)], quote("a", "1")
        )

        groups = ClosedPositionGroupAggregator().group([old, recent, middle])

        assert [g.asset_id for g in groups] == ["b", "a"]
        assert groups[1].cycle_count == 2
        assert groups[1].most_recent_close_date == middle.closed_date

    def test_zero_invested_group(self):
        position = ClosedPositionAggregator().aggregate(
            [buy("x", "1", "0", day=1), sell("x", "1", "5", day=2)], quote("x", "1")
        )

        group = ClosedPositionGroupAggregator().aggregate([position])

        assert group.total_realized_pnl_percentage == Decimal("0")


# =============================================================================
# PARTIAL REALIZED GAINS CALCULATOR TESTS
# =============================================================================

class TestPartialRealizedGainsCalculator:
    """Tests for PartialRealizedGainsCalculator."""

    def test_partial_sell_gain(self):
        """10@2000 bought, 4 sold at 3000: (3000 - 2000) × 4 = 4000."""
        remainder = [buy("eth", "10", "2000", day=1), sell("eth", "4", "3000", day=2)]

        assert PartialRealizedGainsCalculator().calculate(remainder) == Decimal("4000")

    def test_partial_sell_loss(self):
        remainder = [buy("eth", "10", "2000", day=1), sell("eth", "2", "1500", day=2)]

        assert PartialRealizedGainsCalculator().calculate(remainder) == Decimal("-1000")

    def test_uses_buy_only_average(self):
        """Average cost comes from every buy in the remainder."""
        remainder = [
            buy("x", "1", "100", day=1),
            buy("x", "1", "200", day=2),
            sell("x", "1", "999", day=3),
        ]

        assert PartialRealizedGainsCalculator().calculate(remainder) == Decimal("849")

    def test_no_sells_no_gain(self):
        remainder = [buy("x", "1", "100")]
        assert PartialRealizedGainsCalculator().calculate(remainder) == Decimal("0")

    def test_empty_remainder(self):
        assert PartialRealizedGainsCalculator().calculate([]) == Decimal("0")

    def test_total_across_assets(self):
        remainders = {
            "eth": [buy("eth", "10", "2000", day=1), sell("eth", "4", "3000", day=2)],
            "x": [buy("x", "1", "100", day=1), buy("x", "1", "200", day=2), sell("x", "1", "999", day=3)],
        }

        assert PartialRealizedGainsCalculator().calculate_total(remainders) == Decimal("4849")


# =============================================================================
# PORTFOLIO SUMMARY AGGREGATOR TESTS
# =============================================================================

class TestPortfolioSummaryAggregator:
    """Tests for PortfolioSummaryAggregator."""

    @pytest.fixture
    def holding(self):
        return HoldingsCalculator().calculate(
            [buy("bitcoin", "1", "45000", day=5)], quote("bitcoin", "48000")
        )

    @pytest.fixture
    def closed(self):
        return ClosedPositionAggregator().aggregate(
            [buy("bitcoin", "2", "40000", day=1), sell("bitcoin", "2", "50000", day=3)],
            quote("bitcoin", "48000"),
        )

    def test_summary_totals(self, holding, closed):
        summary = PortfolioSummaryAggregator().aggregate([holding], [closed])

        assert summary.total_value == Decimal("48000")
        assert summary.unrealized_pnl == Decimal("3000")
        assert summary.realized_pnl == Decimal("20000")
        assert summary.total_open_cost == Decimal("45000")
        assert summary.total_closed_cost == Decimal("80000")

    def test_total_pnl_is_unrealized_plus_realized(self, holding, closed):
        summary = PortfolioSummaryAggregator().aggregate([holding], [closed])

        assert summary.total_pnl == summary.unrealized_pnl + summary.realized_pnl
        assert summary.total_pnl == Decimal("23000")

    def test_total_pnl_percentage(self, holding, closed):
        """23000 / (45000 + 80000) × 100 = 18.4."""
        summary = PortfolioSummaryAggregator().aggregate([holding], [closed])

        assert summary.total_pnl_percentage == Decimal("18.4")

    def test_partial_gains_are_added_to_realized(self, holding, closed):
        summary = PortfolioSummaryAggregator().aggregate(
            [holding], [closed], partial_realized_gains=Decimal("4000")
        )

        assert summary.closed_realized_pnl == Decimal("20000")
        assert summary.partial_realized_pnl == Decimal("4000")
        assert summary.realized_pnl == Decimal("24000")
        assert summary.total_pnl == Decimal("27000")

    def test_empty_portfolio(self):
        summary = PortfolioSummaryAggregator().aggregate([], [])

        assert summary.total_value == Decimal("0")
        assert summary.total_pnl == Decimal("0")
        assert summary.total_pnl_percentage == Decimal("0")

    def test_closed_only_portfolio(self, closed):
        summary = PortfolioSummaryAggregator().aggregate([], [closed])

        assert summary.total_value == Decimal("0")
        assert summary.total_pnl == Decimal("20000")
        assert summary.total_pnl_percentage == Decimal("25")
