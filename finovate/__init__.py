"""
Finovate - Personal Finance Ledger

A single-user ledger for loans given, rentals collected, debts owed and
miscellaneous income, with payments, reminders, savings accounts, PDF
documents and JSON backups.

DESIGN PRINCIPLES:
1. Every mutation produces a new snapshot
2. Derived figures are always recomputed, never stored
3. No silent corrections
4. Every step must be auditable
5. Storage layer is swappable
"""

from finovate.errors import FinovateError, IdentityMismatchError, ItemNotFoundError
from finovate.services.payment_code import DegradedFeatureError
from finovate.services.storage import StorageError
from finovate.validation import DuplicateItemError, ValidationError

__version__ = "1.0.0"
__author__ = "Finovate Team"

__all__ = [
    "DegradedFeatureError",
    "DuplicateItemError",
    "FinovateError",
    "IdentityMismatchError",
    "ItemNotFoundError",
    "StorageError",
    "ValidationError",
]
