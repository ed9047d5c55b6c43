"""Draft validation package."""

from finovate.validation.validator import (
    DuplicateItemError,
    LedgerValidator,
    ValidationError,
    pydantic_issues,
)

__all__ = [
    "DuplicateItemError",
    "LedgerValidator",
    "ValidationError",
    "pydantic_issues",
]
