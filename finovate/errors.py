"""
Shared exception roots.

Every error the core raises derives from FinovateError so the calling
layer can surface any handled failure without ending the session.
Component-specific errors live next to the component that raises them
(StorageError in services.storage, ValidationError in validation,
DegradedFeatureError in services.payment_code).
"""


class FinovateError(Exception):
    """Base exception for all ledger errors."""
    pass


class IdentityMismatchError(FinovateError):
    """Password or recovery email did not match the registered user."""
    pass


class ItemNotFoundError(FinovateError, KeyError):
    """No record with the requested identifier exists in the ledger."""

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return str(self.args[0]) if self.args else ""
