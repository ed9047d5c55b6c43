"""Services package."""

from finovate.services.documents import (
    DocumentOutputError,
    PdfRenderer,
)
from finovate.services.payment_code import (
    DegradedFeatureError,
    PaymentCodeGenerator,
    QrPaymentCodeGenerator,
)
from finovate.services.storage import (
    InMemoryStorage,
    JsonFileStorage,
    LedgerStorageInterface,
    SlotDecodeError,
    StorageError,
    StorageUnavailableError,
)

__all__ = [
    # Document services
    "DocumentOutputError",
    "PdfRenderer",
    # Payment code
    "DegradedFeatureError",
    "PaymentCodeGenerator",
    "QrPaymentCodeGenerator",
    # Storage services
    "InMemoryStorage",
    "JsonFileStorage",
    "LedgerStorageInterface",
    "SlotDecodeError",
    "StorageError",
    "StorageUnavailableError",
]
