# backend/folio_engine/utils/__init__.py
"""
Utility modules for Folio Engine.

- context: request-scoped correlation ID
- decimal_math: guarded Decimal arithmetic shared by both processes
- logging: setup_logging() and formatters

Only the leaf helpers are re-exported here; import setup_logging from
folio_engine.utils.logging (it needs settings).
"""

from folio_engine.utils.context import (
    clear_correlation_id,
    get_correlation_id,
    set_correlation_id,
)
from folio_engine.utils.decimal_math import (
    decimal_sum,
    percentage_change,
    percentage_of,
    safe_divide,
)

__all__ = [
    "clear_correlation_id",
    "decimal_sum",
    "get_correlation_id",
    "percentage_change",
    "percentage_of",
    "safe_divide",
    "set_correlation_id",
]
