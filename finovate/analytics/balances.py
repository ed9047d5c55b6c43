"""
Per-item balance computation.

    Loan:   capital_paid = sum of capital-allocated payments
            balance      = principal - capital_paid
            (interest payments count toward total_paid only)
    Debt:   every payment is capital, whatever its allocation tag says
    Rental / Other income: no balance, only what was received

Balances are never clamped: an overpaid loan shows a negative balance.
"""

from decimal import Decimal

from finovate.models.analytics import ItemBalance
from finovate.models.ledger import (
    Allocation,
    DebtItem,
    ItemBase,
    LoanItem,
    OtherIncomeItem,
    RentalItem,
)


ZERO = Decimal("0")


def _sum(amounts) -> Decimal:
    return sum(amounts, ZERO)


def compute_balance(item: ItemBase) -> ItemBalance:
    total_paid = _sum(payment.amount for payment in item.payments)

    if isinstance(item, LoanItem):
        capital_paid = _sum(
            p.amount for p in item.payments if p.allocation == Allocation.CAPITAL
        )
        interest_paid = _sum(
            p.amount for p in item.payments if p.allocation == Allocation.INTEREST
        )
        return ItemBalance(
            item_id=item.id,
            kind=item.kind,
            total_paid=total_paid,
            capital_paid=capital_paid,
            interest_paid=interest_paid,
            balance=item.principal - capital_paid,
        )

    if isinstance(item, DebtItem):
        return ItemBalance(
            item_id=item.id,
            kind=item.kind,
            total_paid=total_paid,
            capital_paid=total_paid,
            balance=item.principal - total_paid,
        )

    if isinstance(item, (RentalItem, OtherIncomeItem)):
        return ItemBalance(item_id=item.id, kind=item.kind, total_paid=total_paid)

    raise TypeError(f"Unsupported item type: {type(item).__name__}")


def displayed_amount(item: ItemBase) -> Decimal:
    """The headline amount of an item (what it is worth on the dashboard)."""
    if isinstance(item, RentalItem):
        return item.monthly_amount
    if isinstance(item, (LoanItem, DebtItem, OtherIncomeItem)):
        return item.principal
    raise TypeError(f"Unsupported item type: {type(item).__name__}")


def parse_term_months(term: str, default: int = 12) -> int:
    """
    Leading integer of a free-text term ("12 meses" -> 12).

    Falls back to ``default`` when there is no usable number.
    """
    digits = ""
    for char in term.strip():
        if char.isdigit():
            digits += char
        else:
            break
    months = int(digits) if digits else 0
    return months or default
