# backend/folio_engine/services/ledger/service.py
"""
Ledger service for exporting and importing transaction files.

Export writes a versioned JSON file:

    {
      "version": "1.0",
      "export_date": "...",
      "app_version": "0.1.0",
      "transactions": [{"id", "asset_id", "type", "quantity",
                        "unit_price", "timestamp", "notes"}, ...]
    }

Import reverses it into an ImportPreview:
1. Reject whole-file problems (empty, not JSON, wrong shape, unknown version)
2. Validate every row independently, collecting all of its errors
3. Split rows into valid and invalid; nothing is committed here

Design Principles:
- Decimal-preserving: quantities and prices travel as plain decimal strings
- Detailed error reporting: every rejected row says which field and value
- No HTTP knowledge: raises domain exceptions

Usage:
    from folio_engine.services.ledger import LedgerService

    service = LedgerService(app_version="0.1.0")
    payload = service.export_transactions(transactions)

    preview = service.parse_export(payload)
    for row in preview.invalid_rows:
        print(f"Row {row.row_number}: {', '.join(row.errors)}")
"""

import json
import logging
import uuid
from collections.abc import Sequence
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any

from folio_engine.models import Transaction, TransactionType
from folio_engine.schemas.ledger import ExportFile, ExportTransaction
from folio_engine.services.constants import (
    LEDGER_EXPORT_FILENAME,
    LEDGER_FORMAT_VERSION,
    SUPPORTED_LEDGER_VERSIONS,
    ZERO,
)
from folio_engine.services.exceptions import (
    LedgerEmptyError,
    LedgerFormatError,
    UnsupportedLedgerVersionError,
)
from folio_engine.services.ledger.types import ImportPreview, ImportRow

logger = logging.getLogger(__name__)


def decimal_to_string(value: Decimal) -> str:
    """Plain positional notation: Decimal("1E-8") -> "0.00000001"."""
    return format(value, "f")


class LedgerService:
    """
    Service for ledger export/import.

    Stateless apart from the application version stamped on exports.
    """

    def __init__(self, app_version: str = "0.1.0") -> None:
        self._app_version = app_version

    # =========================================================================
    # EXPORT
    # =========================================================================

    def export_transactions(
            self,
            transactions: Sequence[Transaction],
            exported_at: datetime | None = None,
    ) -> bytes:
        """
        Serialize transactions to an export file.

        Args:
            transactions: Ledger records, written in the given order
            exported_at: Export timestamp (defaults to now, UTC)

        Returns:
            UTF-8 encoded JSON
        """
        export_file = ExportFile(
            version=LEDGER_FORMAT_VERSION,
            export_date=exported_at or datetime.now(timezone.utc),
            app_version=self._app_version,
            transactions=[
                ExportTransaction(
                    id=txn.id,
                    asset_id=txn.asset_id,
                    type=txn.transaction_type.value.lower(),
                    quantity=decimal_to_string(txn.quantity),
                    unit_price=decimal_to_string(txn.unit_price),
                    timestamp=txn.timestamp,
                    notes=txn.notes,
                )
                for txn in transactions
            ],
        )

        logger.info(f"Exporting {len(transactions)} transactions")
        return export_file.model_dump_json(indent=2).encode("utf-8")

    @staticmethod
    def export_filename(on: date) -> str:
        return LEDGER_EXPORT_FILENAME.format(date=on.isoformat())

    # =========================================================================
    # IMPORT
    # =========================================================================

    def parse_export(self, payload: bytes | str) -> ImportPreview:
        """
        Parse an export file into a preview of valid and invalid rows.

        Raises:
            LedgerEmptyError: Empty file or no transactions
            LedgerFormatError: Not JSON, or not shaped like an export file
            UnsupportedLedgerVersionError: Unknown format version
        """
        if isinstance(payload, bytes):
            try:
                payload = payload.decode("utf-8")
            except UnicodeDecodeError as e:
                raise LedgerFormatError("Unable to read file as UTF-8 text") from e

        if not payload.strip():
            raise LedgerEmptyError()

        try:
            data = json.loads(payload, parse_float=Decimal)
        except json.JSONDecodeError as e:
            raise LedgerFormatError(f"Invalid JSON structure: {e.msg} (line {e.lineno})") from e

        if not isinstance(data, dict):
            raise LedgerFormatError("Expected a JSON object at the top level")

        version = data.get("version")
        if version is None:
            raise LedgerFormatError("Missing 'version'")
        if str(version) not in SUPPORTED_LEDGER_VERSIONS:
            raise UnsupportedLedgerVersionError(str(version))

        raw_rows = data.get("transactions")
        if raw_rows is None:
            raise LedgerFormatError("Missing 'transactions'")
        if not isinstance(raw_rows, list):
            raise LedgerFormatError("'transactions' must be a list")
        if not raw_rows:
            raise LedgerEmptyError()

        preview = ImportPreview(file_version=str(version))
        for index, raw in enumerate(raw_rows):
            row = self._validate_row(index + 1, raw)
            if row.is_valid:
                preview.valid_rows.append(row)
            else:
                preview.invalid_rows.append(row)

        logger.info(
            f"Ledger parse complete: {len(preview.valid_rows)} valid, "
            f"{len(preview.invalid_rows)} invalid rows"
        )
        return preview

    # =========================================================================
    # PRIVATE METHODS
    # =========================================================================

    def _validate_row(self, row_number: int, raw: Any) -> ImportRow:
        """Validate one row, collecting every error rather than stopping at the first."""
        if not isinstance(raw, dict):
            return ImportRow(
                row_number=row_number,
                asset_id="",
                transaction_type=None,
                quantity=None,
                unit_price=None,
                timestamp=None,
                errors=("Row must be a JSON object",),
            )

        errors: list[str] = []

        asset_id = raw.get("asset_id")
        asset_id = asset_id.strip() if isinstance(asset_id, str) else ""
        if not asset_id:
            errors.append("Missing asset_id")

        transaction_type = self._parse_type(raw.get("type"), errors)
        quantity = self._parse_decimal(raw, "quantity", errors)
        if quantity is not None and quantity <= ZERO:
            errors.append("quantity must be positive")
            quantity = None

        unit_price = self._parse_decimal(raw, "unit_price", errors)
        if unit_price is not None and unit_price < ZERO:
            errors.append("unit_price cannot be negative")
            unit_price = None

        timestamp = self._parse_timestamp(raw.get("timestamp"), errors)
        transaction_id = self._parse_id(raw.get("id"), errors)

        notes = raw.get("notes")
        if notes is not None and not isinstance(notes, str):
            notes = str(notes)

        return ImportRow(
            row_number=row_number,
            asset_id=asset_id,
            transaction_type=transaction_type,
            quantity=quantity,
            unit_price=unit_price,
            timestamp=timestamp,
            notes=notes,
            transaction_id=transaction_id,
            errors=tuple(errors),
        )

    @staticmethod
    def _parse_type(value: Any, errors: list[str]) -> TransactionType | None:
        if value is None or (isinstance(value, str) and not value.strip()):
            errors.append("Missing type")
            return None
        try:
            return TransactionType(str(value).strip().upper())
        except ValueError:
            errors.append(f"Invalid type '{value}' (must be 'buy' or 'sell')")
            return None

    @staticmethod
    def _parse_decimal(raw: dict[str, Any], field: str, errors: list[str]) -> Decimal | None:
        value = raw.get(field)
        if value is None or (isinstance(value, str) and not value.strip()):
            errors.append(f"Missing {field}")
            return None
        if isinstance(value, bool):
            errors.append(f"Invalid number '{value}' for {field}")
            return None
        try:
            parsed = Decimal(str(value).strip())
        except InvalidOperation:
            errors.append(f"Invalid number '{value}' for {field}")
            return None
        if not parsed.is_finite():
            errors.append(f"Invalid number '{value}' for {field}")
            return None
        return parsed

    @staticmethod
    def _parse_timestamp(value: Any, errors: list[str]) -> datetime | None:
        if value is None or (isinstance(value, str) and not value.strip()):
            errors.append("Missing timestamp")
            return None
        if not isinstance(value, str):
            errors.append(f"Invalid timestamp '{value}'")
            return None
        try:
            parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            errors.append(f"Invalid timestamp '{value}'")
            return None
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed

    @staticmethod
    def _parse_id(value: Any, errors: list[str]) -> uuid.UUID | None:
        # Rows without an id get a fresh one when converted
        if value is None:
            return None
        try:
            return uuid.UUID(str(value))
        except ValueError:
            errors.append(f"Invalid id '{value}'")
            return None
