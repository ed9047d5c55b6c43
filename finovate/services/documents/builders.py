"""
Document Builders

Pure functions that turn ledger records into structured Documents:

- build_receipt:         one payment on any item
- build_loan_statement:  loan summary plus a running capital ledger
- build_invoice:         collection request, optionally with a payment code

Printed text is Spanish; dates print as dd/mm/YYYY and amounts as the
currency symbol followed by two decimals.

Nothing here renders or writes files. See pdf_renderer for that.
"""

from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional
from uuid import uuid4

from finovate.analytics.balances import ZERO, compute_balance, parse_term_months
from finovate.config import get_settings
from finovate.models.documents import (
    Document,
    DocumentField,
    DocumentKind,
    DocumentSection,
    DocumentTable,
)
from finovate.models.ledger import (
    Allocation,
    BankAccount,
    InvoiceDetails,
    ItemBase,
    LoanItem,
    Payment,
    User,
)
from finovate.services.payment_code.generator import bank_listing
from finovate.validation.validator import ValidationError


CENT = Decimal("0.01")

NO_BANK_ACCOUNTS = "No hay cuentas bancarias configuradas."
OPENING_ROW = "Monto inicial del préstamo"


# =============================================================================
# FORMATTING
# =============================================================================

def format_money(amount: Decimal, symbol: Optional[str] = None) -> str:
    if symbol is None:
        symbol = get_settings().documents.currency_symbol
    value = Decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP)
    return f"{symbol}{value}"


def format_date(value: date) -> str:
    return value.strftime("%d/%m/%Y")


def format_timestamp(value: datetime) -> str:
    return value.strftime("%d/%m/%Y, %H:%M:%S")


def format_rate(rate: Decimal) -> str:
    """5 -> '5%', 2.50 -> '2.5%'."""
    text = format(Decimal(rate).normalize(), "f")
    return f"{text}%"


def _line(value: str) -> DocumentField:
    return DocumentField(label="", value=value)


def _safe_name(name: str) -> str:
    return "_".join(name.split())


def _party(heading: str, item: ItemBase, with_phone: bool = True) -> DocumentSection:
    fields = [_line(item.person_name)]
    if item.person_id:
        fields.append(DocumentField(label="ID", value=item.person_id))
    if with_phone and item.person_phone:
        fields.append(DocumentField(label="Tel", value=item.person_phone))
    return DocumentSection(heading=heading, fields=tuple(fields))


# =============================================================================
# RECEIPT
# =============================================================================

def build_receipt(
    user: User,
    item: ItemBase,
    payment: Payment,
    today: Optional[date] = None,
) -> Document:
    """Payment receipt for one payment of ``item``."""
    today = today or date.today()
    brand = get_settings().documents.brand_name

    details = [
        DocumentField(label="ID del Recibo", value=payment.id[:18]),
        DocumentField(label="Fecha de Pago", value=format_date(payment.paid_on)),
        DocumentField(label="Método de Pago", value=payment.method),
        DocumentField(label="Tipo de Ítem", value=item.kind.label),
        DocumentField(label="Descripción", value=item.description),
    ]
    if isinstance(item, LoanItem) and payment.allocation is not None:
        details.append(DocumentField(label="Concepto", value=payment.allocation.label))

    return Document(
        kind=DocumentKind.RECEIPT,
        title=brand,
        subtitle="Recibo de Pago",
        sections=(
            DocumentSection(
                heading="De",
                fields=(_line(user.name), _line(user.email), _line(user.phone)),
            ),
            _party("Para", item, with_phone=False),
            DocumentSection(heading="Detalles del Pago", fields=tuple(details)),
        ),
        highlight=DocumentField(label="Monto Pagado", value=format_money(payment.amount)),
        footer_lines=(
            f"Gracias por su pago. Este recibo fue generado el {format_date(today)}.",
        ),
        filename=f"{brand}-Recibo-{payment.id}.pdf",
    )


# =============================================================================
# LOAN STATEMENT
# =============================================================================

def statement_rows(item: LoanItem) -> list[tuple[str, ...]]:
    """
    Opening row at the principal, then one row per payment in date order.

    The running balance only moves on capital payments. Sorting is stable
    and works on a copy; the item's own payment order is untouched.
    """
    running = item.principal
    rows = [(
        format_date(item.start_date),
        OPENING_ROW,
        format_money(item.principal),
        format_money(running),
    )]
    for payment in sorted(item.payments, key=lambda p: p.paid_on):
        if payment.allocation == Allocation.CAPITAL:
            running -= payment.amount
        description = payment.allocation.label if payment.allocation else "Pago"
        rows.append((
            format_date(payment.paid_on),
            description,
            format_money(payment.amount),
            format_money(running),
        ))
    return rows


def build_loan_statement(
    user: User,
    item: ItemBase,
    generated_at: Optional[datetime] = None,
) -> Document:
    """
    Account statement for a loan.

    Raises:
        ValidationError: If ``item`` is not a loan
    """
    if not isinstance(item, LoanItem):
        raise ValidationError(
            f"Statements are only available for loans, not {item.kind.label}"
        )

    generated_at = generated_at or datetime.now()
    settings = get_settings().documents
    balance = compute_balance(item)

    summary = (
        DocumentField(label="Monto Principal", value=format_money(item.principal)),
        DocumentField(label="Tasa de Interés", value=format_rate(item.interest_rate)),
        DocumentField(label="Plazo", value=item.term),
        DocumentField(label="Fecha de Inicio", value=format_date(item.start_date)),
        DocumentField(label="Total Pagado", value=format_money(balance.total_paid)),
        DocumentField(label="Saldo de Capital", value=format_money(balance.balance)),
        DocumentField(label="Capital Pagado", value=format_money(balance.capital_paid)),
        DocumentField(label="Intereses Pagados", value=format_money(balance.interest_paid)),
    )

    return Document(
        kind=DocumentKind.LOAN_STATEMENT,
        title=settings.brand_name,
        subtitle="Estado de Cuenta",
        header_lines=(f"Generado: {format_timestamp(generated_at)}",),
        sections=(
            DocumentSection(
                heading="Acreedor (Prestador)",
                fields=(_line(user.name), _line(user.email)),
            ),
            _party("Deudor", item),
            DocumentSection(heading="Resumen del Crédito", fields=summary),
        ),
        tables=(
            DocumentTable(
                heading="Historial de Transacciones",
                columns=("Fecha", "Descripción", "Monto", "Saldo Capital"),
                rows=tuple(statement_rows(item)),
            ),
        ),
        footer_lines=(f"{settings.brand_name} - Tu asistente financiero personal.",),
        filename=f"EstadoDeCuenta-{_safe_name(item.person_name)}-{item.id}.pdf",
        generated_at=generated_at,
    )


# =============================================================================
# INVOICE
# =============================================================================

def default_invoice_details(item: ItemBase, today: Optional[date] = None) -> InvoiceDetails:
    """
    Pre-filled invoice for an item.

    Amount: the monthly amount when set; otherwise the principal split over
    the term (default 12 months) once payments exist, or the whole
    principal before the first payment.
    """
    today = today or date.today()
    monthly = getattr(item, "monthly_amount", None)
    if monthly:
        amount = monthly
    else:
        principal = getattr(item, "principal", ZERO)
        if item.payments:
            amount = principal / parse_term_months(getattr(item, "term", ""))
        else:
            amount = principal

    return InvoiceDetails(
        amount=Decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP),
        concept=f"Cuota de {item.kind.label.lower()} - {item.description}",
        due_date=today,
    )


def new_invoice_number() -> str:
    return uuid4().hex[:8].upper()


def build_invoice(
    user: User,
    item: ItemBase,
    details: InvoiceDetails,
    bank_accounts: Iterable[BankAccount],
    payment_code: Optional[bytes] = None,
    today: Optional[date] = None,
    invoice_number: Optional[str] = None,
) -> Document:
    """Collection invoice. ``payment_code`` is a PNG embedded when given."""
    today = today or date.today()
    invoice_number = invoice_number or new_invoice_number()
    settings = get_settings().documents

    issuer = [_line(user.name), _line(user.address), _line(user.email)]
    if user.id_document:
        issuer.append(DocumentField(label="ID", value=user.id_document))

    accounts = [f"- {entry}" for entry in bank_listing(bank_accounts)]
    instructions = tuple(_line(entry) for entry in accounts or [NO_BANK_ACCOUNTS])
    amount = format_money(details.amount)

    return Document(
        kind=DocumentKind.INVOICE,
        title="FACTURA DE COBRO",
        header_lines=(
            f"Factura #{invoice_number}",
            f"Fecha de Emisión: {format_date(today)}",
            f"Fecha de Vencimiento: {format_date(details.due_date)}",
        ),
        sections=(
            DocumentSection(heading="De (Acreedor)", fields=tuple(issuer)),
            _party("Para (Deudor)", item),
            DocumentSection(heading="Información de Pago", fields=instructions),
        ),
        tables=(
            DocumentTable(
                heading="Detalle",
                columns=("Concepto", "Monto"),
                rows=((details.concept, amount),),
            ),
        ),
        highlight=DocumentField(label="TOTAL A PAGAR", value=amount),
        image_caption="Escanear para Pagar:" if payment_code else "",
        image_png=payment_code,
        footer_lines=(
            "Gracias por su negocio.",
            f"{settings.brand_name} | {user.name} | {user.email}",
        ),
        filename=f"Factura-{_safe_name(item.person_name)}-{invoice_number}.pdf",
    )
