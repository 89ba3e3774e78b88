# backend/folio_engine/utils/decimal_math.py
"""
Guarded Decimal arithmetic shared by the accounting engine and the
refresh path.

Every division in the engine goes through these helpers so that a zero
denominator yields Decimal("0") instead of raising DivisionByZero or
producing NaN/Infinity. The full engine and the refresh recalculator use
the same helpers, which keeps their outputs identical for identical inputs.

Usage:
    from folio_engine.utils.decimal_math import safe_divide, percentage_change

    avg_cost = safe_divide(total_cost, total_quantity)
    pnl_pct = percentage_change(current_value, cost_basis)
"""

from collections.abc import Iterable
from decimal import Decimal

from folio_engine.services.constants import HUNDRED, ONE, ZERO


def safe_divide(numerator: Decimal, denominator: Decimal) -> Decimal:
    """
    Divide two Decimals, returning 0 when the denominator is 0.

    Args:
        numerator: Dividend
        denominator: Divisor

    Returns:
        numerator / denominator, or Decimal("0") if denominator == 0
    """
    if denominator == ZERO:
        return ZERO
    return numerator / denominator


def percentage_change(current: Decimal, base: Decimal) -> Decimal:
    """
    Relative change of current over base, in percent.

    Formula:
        (current / base - 1) × 100

    Returns Decimal("0") when base is 0.
    """
    if base == ZERO:
        return ZERO
    return ((current / base) - ONE) * HUNDRED


def percentage_of(part: Decimal, whole: Decimal) -> Decimal:
    """part / whole × 100, or 0 when whole is 0."""
    if whole == ZERO:
        return ZERO
    return (part / whole) * HUNDRED


def decimal_sum(values: Iterable[Decimal]) -> Decimal:
    """Sum Decimals starting from Decimal("0") (sum() would start from int 0)."""
    total = ZERO
    for value in values:
        total += value
    return total
