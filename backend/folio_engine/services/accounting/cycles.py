# backend/folio_engine/services/accounting/cycles.py
"""
Trading cycle detection.

A cycle is a maximal contiguous run of one asset's transactions whose
signed quantity balance starts at zero and returns to zero. Everything
after the last such return is the open remainder, which defines the
currently held position.

Algorithm:
    balance = 0
    for each transaction (chronological):
        balance += quantity   (BUY)
        balance -= quantity   (SELL)
        if |balance| < tolerance:
            slice [cycle_start .. index] is a closed cycle
            cycle_start = index + 1, balance = 0

A run that is all buys or all sells never returns to zero, so it stays in
the remainder. A balance that goes negative without touching zero
(overselling) is not corrected here: it is reported as a warning and the
transactions stay in the remainder, where HoldingsCalculator drops the
non-positive position.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from decimal import Decimal
from operator import attrgetter

from folio_engine.models import Transaction
from folio_engine.services.accounting.types import CycleSplit
from folio_engine.services.constants import ZERO, ZERO_BALANCE_TOLERANCE

logger = logging.getLogger(__name__)


def sort_chronologically(transactions: Iterable[Transaction]) -> list[Transaction]:
    """
    Sort transactions ascending by timestamp.

    The sort is stable: transactions sharing a timestamp keep their input
    order, so identical ledgers always produce identical cycles.
    """
    return sorted(transactions, key=attrgetter("timestamp"))


class CycleDetector:
    """
    Partitions one asset's transactions into closed cycles and an open remainder.

    Stateless apart from the configured tolerance; safe to share.
    """

    def __init__(self, tolerance: Decimal = ZERO_BALANCE_TOLERANCE) -> None:
        """
        Args:
            tolerance: |balance| strictly below this value counts as zero
        """
        self._tolerance = tolerance

    @property
    def tolerance(self) -> Decimal:
        return self._tolerance

    def is_flat(self, balance: Decimal) -> bool:
        """True if the running balance is within tolerance of zero."""
        return abs(balance) < self._tolerance

    def split(
            self,
            asset_id: str,
            transactions: Iterable[Transaction],
    ) -> CycleSplit:
        """
        Detect closed cycles for a single asset.

        Args:
            asset_id: Asset the transactions belong to
            transactions: All transactions for this asset (any order)

        Returns:
            CycleSplit with closed cycles, the open remainder and warnings
        """
        ordered = sort_chronologically(transactions)

        closed_cycles: list[tuple[Transaction, ...]] = []
        warnings: list[str] = []
        cycle_start = 0
        balance = ZERO
        oversold_reported = False

        for index, txn in enumerate(ordered):
            balance += txn.signed_quantity

            if self.is_flat(balance):
                closed_cycles.append(tuple(ordered[cycle_start:index + 1]))
                cycle_start = index + 1
                balance = ZERO
                continue

            if balance < ZERO and not oversold_reported:
                # Reported once per asset; the remainder keeps the raw balance
                message = (
                    f"Sell {txn.id} for {asset_id} exceeds the held quantity "
                    f"(balance {balance})"
                )
                logger.warning(message)
                warnings.append(message)
                oversold_reported = True

        open_remainder = tuple(ordered[cycle_start:])

        logger.debug(
            f"Cycle detection for {asset_id}: {len(closed_cycles)} closed, "
            f"{len(open_remainder)} open transactions"
        )

        return CycleSplit(
            asset_id=asset_id,
            closed_cycles=tuple(closed_cycles),
            open_remainder=open_remainder,
            warnings=tuple(warnings),
        )

    def open_remainder(
            self,
            asset_id: str,
            transactions: Iterable[Transaction],
    ) -> tuple[Transaction, ...]:
        """Shortcut returning only the open remainder."""
        return self.split(asset_id, transactions).open_remainder
