"""Payment code (QR) generation for invoices."""

from finovate.services.payment_code.generator import (
    DegradedFeatureError,
    PaymentCodeGenerator,
    QrPaymentCodeGenerator,
    bank_listing,
    build_payment_code_text,
)

__all__ = [
    "DegradedFeatureError",
    "PaymentCodeGenerator",
    "QrPaymentCodeGenerator",
    "bank_listing",
    "build_payment_code_text",
]
