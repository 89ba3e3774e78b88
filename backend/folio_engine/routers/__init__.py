# backend/folio_engine/routers/__init__.py
"""
API routers for Folio Engine.

- accounting: /portfolio/* (ledger + quotes -> derived state, snapshot)
- refresh: /refresh/* (snapshot + prices -> display aggregate)
- ledger: /ledger/* (export / import preview)
"""

from folio_engine.routers.accounting import router as accounting_router
from folio_engine.routers.ledger import router as ledger_router
from folio_engine.routers.refresh import router as refresh_router

__all__ = [
    "accounting_router",
    "ledger_router",
    "refresh_router",
]
