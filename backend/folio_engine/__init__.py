# backend/folio_engine/__init__.py
"""
Folio Engine: transaction-ledger portfolio accounting.

Derives holdings, closed trading cycles, realized/unrealized P&L and a
compact refresh snapshot from an append-only ledger of buy/sell records.
"""

__version__ = "0.1.0"
