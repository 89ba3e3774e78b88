# backend/folio_engine/services/__init__.py
"""
Business logic for Folio Engine.

Subpackages:
- accounting: ledger -> holdings, closed positions, summary
- refresh: snapshot revaluation for the constrained refresh process
- ledger: export/import of the transaction ledger

Import from the subpackages directly; this module stays empty so that
constants and exceptions load without pulling in the engine.
"""
