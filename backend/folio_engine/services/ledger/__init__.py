# backend/folio_engine/services/ledger/__init__.py
"""
Ledger export/import.

Components:
    - LedgerService: export to a versioned JSON file, parse one back into a preview
    - ImportPreview / ImportRow: row-level validation results
"""

from folio_engine.services.ledger.service import LedgerService, decimal_to_string
from folio_engine.services.ledger.types import ImportPreview, ImportRow

__all__ = [
    "ImportPreview",
    "ImportRow",
    "LedgerService",
    "decimal_to_string",
]
