"""
Ledger package.

LedgerStore persists snapshots; Ledger owns the current one and every
operation that changes it.
"""

from finovate.ledger.store import LedgerStore, LoadResult
from finovate.ledger.service import Ledger

__all__ = [
    "Ledger",
    "LedgerStore",
    "LoadResult",
]
