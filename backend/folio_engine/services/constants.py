# backend/folio_engine/services/constants.py
"""
Centralized constants for the Folio Engine services.

This module provides a single source of truth for the business constants
used by the accounting engine, the refresh path and the ledger format.
Settings in folio_engine.config default to these values.

Usage:
    from folio_engine.services.constants import (
        ZERO_BALANCE_TOLERANCE,
        STALE_AFTER_MINUTES,
    )
"""

from decimal import Decimal


# =============================================================================
# DECIMAL HELPERS
# =============================================================================

ZERO: Decimal = Decimal("0")
ONE: Decimal = Decimal("1")
HUNDRED: Decimal = Decimal("100")


# =============================================================================
# CYCLE DETECTION
# =============================================================================

# A per-asset running balance whose magnitude is strictly below this value
# is treated as zero, closing the current trading cycle.
# Absorbs rounding noise in externally sourced quantities (e.g. 0.999999999).
ZERO_BALANCE_TOLERANCE: Decimal = Decimal("0.00000001")


# =============================================================================
# REFRESH / DISPLAY SETTINGS
# =============================================================================

# Maximum holdings kept in the display aggregate (display-space limit)
DISPLAY_MAX_HOLDINGS: int = 5

# Age after which a display aggregate is flagged stale
STALE_AFTER_MINUTES: int = 60

# Version of the serialized refresh snapshot / display aggregate
REFRESH_SCHEMA_VERSION: int = 1


# =============================================================================
# LEDGER EXPORT FORMAT
# =============================================================================

# Version written into every ledger export file
LEDGER_FORMAT_VERSION: str = "1.0"

# Versions the importer understands
SUPPORTED_LEDGER_VERSIONS: frozenset[str] = frozenset({"1.0"})

# Export file name pattern (filled with the export date, YYYY-MM-DD)
LEDGER_EXPORT_FILENAME: str = "folio-ledger-{date}.json"


# =============================================================================
# RATE LIMITING
# =============================================================================

# Compute endpoints are pure CPU work on the request body
RATE_LIMIT_COMPUTE: str = "60/minute"

# Ledger import/export handles whole files
RATE_LIMIT_LEDGER: str = "20/minute"

# Health checks are polled by orchestrators
RATE_LIMIT_HEALTH: str = "120/minute"
