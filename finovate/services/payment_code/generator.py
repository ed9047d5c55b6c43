"""
Payment Code Generator

Turns a short payment instruction into a scannable QR image (PNG bytes)
that is embedded in collection invoices.

This is the only step of document generation that depends on an external
component. Any failure is reported as DegradedFeatureError so the invoice
flow can fall back to an invoice without the code.
"""

import io
from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Iterable, Optional

import qrcode
import structlog
from qrcode.image.pil import PilImage

from finovate.config import get_settings
from finovate.errors import FinovateError
from finovate.models.ledger import BankAccount, InvoiceDetails, User


logger = structlog.get_logger(__name__)


class DegradedFeatureError(FinovateError):
    """An optional collaborator failed; the caller continues without it."""
    pass


def bank_listing(bank_accounts: Iterable[BankAccount]) -> list[str]:
    return [
        f"Banco: {account.bank_name}, Cuenta: {account.account_name}"
        for account in bank_accounts
    ]


def build_payment_code_text(
    user: User,
    details: InvoiceDetails,
    bank_accounts: Iterable[BankAccount],
    currency_symbol: Optional[str] = None,
) -> str:
    """
    Payload encoded in the invoice's payment code:

        Pagar a: <user name>
        Concepto: <concept>
        Monto: $<amount, 2 decimals>
        Banco: X, Cuenta: Y; Banco: Z, Cuenta: W
    """
    if currency_symbol is None:
        currency_symbol = get_settings().documents.currency_symbol
    amount = Decimal(details.amount).quantize(Decimal("0.01"))
    return (
        f"Pagar a: {user.name}\n"
        f"Concepto: {details.concept}\n"
        f"Monto: {currency_symbol}{amount}\n"
        f"{'; '.join(bank_listing(bank_accounts))}"
    )


class PaymentCodeGenerator(ABC):
    """Anything that can turn text into an image."""

    @abstractmethod
    def generate(self, text: str) -> bytes:
        """
        Render ``text`` as a PNG image.

        Raises:
            DegradedFeatureError: If the image cannot be produced
        """
        pass


class QrPaymentCodeGenerator(PaymentCodeGenerator):
    """QR codes through the ``qrcode`` library."""

    def __init__(self, box_size: Optional[int] = None, border: int = 4):
        self._box_size = box_size or get_settings().documents.qr_box_size
        self._border = border

    def generate(self, text: str) -> bytes:
        if not text:
            raise DegradedFeatureError("Nothing to encode in the payment code")
        try:
            qr = qrcode.QRCode(
                error_correction=qrcode.constants.ERROR_CORRECT_M,
                box_size=self._box_size,
                border=self._border,
            )
            qr.add_data(text)
            qr.make(fit=True)
            image = qr.make_image(image_factory=PilImage)
            buffer = io.BytesIO()
            image.save(buffer)
        except Exception as e:
            logger.warning("payment_code_failed", error=str(e))
            raise DegradedFeatureError(f"Payment code could not be generated: {e}") from e

        return buffer.getvalue()
