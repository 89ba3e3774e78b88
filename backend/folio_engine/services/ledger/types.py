# backend/folio_engine/services/ledger/types.py
"""
Result types for ledger import.

An import never fails row by row: every row is parsed, validated and
returned with its errors, so the caller can show a preview and decide
whether to commit the valid part.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from folio_engine.models import Transaction, TransactionType


@dataclass(frozen=True)
class ImportRow:
    """
    One row of an import file with its validation status.

    Attributes:
        row_number: 1-based position in the file
        asset_id: Trimmed asset identifier ("" when missing)
        transaction_type: Parsed type, None when invalid
        quantity: Parsed quantity, None when invalid
        unit_price: Parsed unit price, None when invalid
        timestamp: Parsed timestamp, None when invalid
        notes: Free text carried through unchanged
        transaction_id: Id from the file (a fresh one when absent)
        errors: Human-readable problems, empty for a valid row
    """

    row_number: int
    asset_id: str
    transaction_type: TransactionType | None
    quantity: Decimal | None
    unit_price: Decimal | None
    timestamp: datetime | None
    notes: str | None = None
    transaction_id: uuid.UUID | None = None
    errors: tuple[str, ...] = ()

    @property
    def is_valid(self) -> bool:
        return (
            not self.errors
            and bool(self.asset_id)
            and self.transaction_type is not None
            and self.quantity is not None
            and self.unit_price is not None
            and self.timestamp is not None
        )

    def to_transaction(self) -> Transaction | None:
        """Build the ledger record, or None for an invalid row."""
        if not self.is_valid:
            return None
        return Transaction(
            id=self.transaction_id or uuid.uuid4(),
            asset_id=self.asset_id,
            transaction_type=self.transaction_type,
            quantity=self.quantity,
            unit_price=self.unit_price,
            timestamp=self.timestamp,
            notes=self.notes,
        )


@dataclass
class ImportPreview:
    """Parsed import file split into valid and invalid rows."""

    file_version: str
    valid_rows: list[ImportRow] = field(default_factory=list)
    invalid_rows: list[ImportRow] = field(default_factory=list)

    @property
    def total_row_count(self) -> int:
        return len(self.valid_rows) + len(self.invalid_rows)

    @property
    def has_valid_data(self) -> bool:
        return bool(self.valid_rows)

    def transactions(self) -> list[Transaction]:
        """Ledger records for every valid row, in file order."""
        return [row.to_transaction() for row in self.valid_rows]
