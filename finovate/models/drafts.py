"""
Draft Models

Raw form input before it becomes a ledger record.

CRITICAL: A draft is PROPOSED data, NOT a record. Every field is optional
because the user may leave any of them blank. Drafts go through the
validator, which reports missing or suspicious values instead of guessing,
and only then are turned into the immutable ledger models.
"""

from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from finovate.models.ledger import Allocation, ItemKind


class DraftModel(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)


class ItemDraft(DraftModel):
    """Input for a new financial item of any kind."""

    kind: ItemKind

    person_name: Optional[str] = None
    person_id: Optional[str] = None
    person_phone: Optional[str] = None
    description: str = ""
    start_date: Optional[date] = None

    # Loan / Debt / Other income
    principal: Optional[Decimal] = None
    # Loan
    interest_rate: Optional[Decimal] = None
    term: str = ""
    # Loan (installment, optional) / Rental
    monthly_amount: Optional[Decimal] = None
    # Rental
    payment_day: Optional[int] = None
    # Debt
    due_date: Optional[date] = None


class PaymentDraft(DraftModel):
    """Input for a payment on an existing item."""

    amount: Optional[Decimal] = None
    paid_on: Optional[date] = None
    method: str = "Efectivo"
    allocation: Optional[Allocation] = None


class ReminderDraft(DraftModel):
    text: Optional[str] = None
    remind_on: Optional[date] = None


class BankAccountDraft(DraftModel):
    bank_name: Optional[str] = None
    account_name: Optional[str] = None
    balance: Optional[Decimal] = None


class RegistrationDraft(DraftModel):
    """
    Registration form.

    Every profile field is mandatory; the password is typed twice.
    """

    name: Optional[str] = None
    age: Optional[int] = Field(default=None, ge=0, le=150)
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    occupation: Optional[str] = None
    password: Optional[str] = None
    confirm_password: Optional[str] = None
