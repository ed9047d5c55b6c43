"""
Core Ledger Models for Finovate

These models define the strict schemas for all data held in the ledger.
They are designed to:
1. Enforce type safety at runtime
2. Be immutable values (every mutation produces a new snapshot)
3. Serialize to the camelCase JSON layout used by the persisted slots
   and the export documents
4. Make the four item kinds a real sum type: each variant carries only
   the fields that mean something for it

DESIGN DECISION: Money is Decimal, never float. Missing amounts read
from older documents (null / absent) are treated as zero rather than
rejected, because every aggregate treats them as zero anyway.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, ClassVar, Optional, Union
from uuid import uuid4

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Discriminator,
    Field,
    Tag,
    TypeAdapter,
    PlainSerializer,
    computed_field,
)
from pydantic.alias_generators import to_camel


def new_id() -> str:
    """Generate a fresh record identifier."""
    return str(uuid4())


def _none_as_zero(value: Any) -> Any:
    if value is None or value == "":
        return Decimal("0")
    return value


def _as_number(value: Decimal) -> Union[int, float, str]:
    if value == value.to_integral_value():
        return int(value)
    as_float = float(value)
    if Decimal(repr(as_float)) == value:
        return as_float
    # More digits than a JSON float keeps
    return str(value)


# Amounts are JSON numbers in the persisted layout, or strings when a
# float would round them
Amount = Annotated[Decimal, PlainSerializer(_as_number, when_used="json")]

# Amount that reads null/absent as zero
Money = Annotated[Amount, BeforeValidator(_none_as_zero)]


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class ItemKind(str, Enum):
    """
    The four kinds of financial record.

    Documents written by earlier versions used the Spanish display labels
    as values; those are still accepted on input.
    """
    LOAN = "loan"
    RENTAL = "rental"
    DEBT = "debt"
    OTHER_INCOME = "other_income"

    @classmethod
    def _missing_(cls, value: object) -> Optional["ItemKind"]:
        if isinstance(value, str):
            for kind, label in _KIND_LABELS.items():
                if value.strip().lower() in (label.lower(), kind.name.lower()):
                    return kind
        return None

    @property
    def label(self) -> str:
        """Display label printed on documents."""
        return _KIND_LABELS[self]


_KIND_LABELS = {
    ItemKind.LOAN: "Préstamo",
    ItemKind.RENTAL: "Arriendo",
    ItemKind.DEBT: "Deuda",
    ItemKind.OTHER_INCOME: "Otro Ingreso",
}


class Allocation(str, Enum):
    """
    Which part of a loan a payment reduces.

    Only meaningful for loans. Debt payments always count as capital.
    """
    CAPITAL = "capital"
    INTEREST = "interest"

    @classmethod
    def _missing_(cls, value: object) -> Optional["Allocation"]:
        if isinstance(value, str) and value.strip().lower() in ("interes", "interés"):
            return cls.INTEREST
        return None

    @property
    def label(self) -> str:
        if self is Allocation.CAPITAL:
            return "Abono a Capital"
        return "Pago de Intereses"


class EventKind(str, Enum):
    """Direction of an upcoming event."""
    COLLECTION = "collection"  # money comes in
    PAYMENT = "payment"        # money goes out


# =============================================================================
# BASE
# =============================================================================

class LedgerModel(BaseModel):
    """
    Common configuration for every persisted record.

    Python attributes are snake_case, the JSON layout is camelCase;
    both spellings are accepted when validating.
    """
    model_config = ConfigDict(
        str_strip_whitespace=True,
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_document(self) -> dict:
        """JSON-compatible dict in the persisted layout."""
        return self.model_dump(mode="json", by_alias=True)


# =============================================================================
# USER
# =============================================================================

class User(LedgerModel):
    """
    The single ledger owner.

    The password is a local unlock code kept in clear text, exactly as
    entered. It is NOT a security boundary and is deliberately not hashed.
    It is serialized under ``passwordHash`` for compatibility with
    existing backups.
    """

    id: str = Field(default_factory=new_id)
    name: str = Field(..., min_length=1, max_length=200)
    age: int = Field(..., ge=0, le=150)
    address: str = Field(..., max_length=500)
    phone: str = Field(..., max_length=50)
    email: str = Field(..., max_length=200)
    occupation: str = Field(..., max_length=200)
    password: str = Field(..., alias="passwordHash", repr=False)
    profile_picture: Optional[str] = Field(
        default=None,
        repr=False,
        description="Base64 image data"
    )
    id_document: Optional[str] = Field(
        default=None,
        max_length=50,
        description="National ID / document number printed on invoices"
    )

    def check_password(self, candidate: str) -> bool:
        return candidate == self.password

    def check_email(self, candidate: str) -> bool:
        return candidate.strip() == self.email


# =============================================================================
# PAYMENTS
# =============================================================================

class Payment(LedgerModel):
    """
    One payment attached to a financial item.

    Immutable once created, except for the receipt_generated flag which
    is replaced through ``with_receipt_generated``.
    """

    id: str = Field(default_factory=new_id)
    amount: Amount = Field(..., gt=0, description="Amount paid")
    paid_on: date = Field(..., alias="date")
    method: str = Field(default="Efectivo", max_length=100)
    receipt_generated: bool = False
    allocation: Optional[Allocation] = Field(
        default=None,
        description="Loan payments only: capital or interest"
    )

    def with_receipt_generated(self) -> "Payment":
        return self.model_copy(update={"receipt_generated": True})


# =============================================================================
# FINANCIAL ITEMS (sum type)
# =============================================================================

class ItemBase(LedgerModel):
    """
    Fields shared by every kind of financial record.

    Payments are kept in entry order, which is NOT guaranteed to be
    chronological.
    """

    kind: ClassVar[ItemKind]

    id: str = Field(default_factory=new_id)
    person_name: str = Field(..., min_length=1, max_length=200)
    person_id: Optional[str] = Field(default=None, max_length=50)
    person_phone: Optional[str] = Field(default=None, max_length=50)
    description: str = Field(default="", max_length=1000)
    start_date: date
    payments: tuple[Payment, ...] = ()

    @computed_field(alias="type")
    @property
    def item_type(self) -> ItemKind:
        return self.kind

    def with_payment(self, payment: Payment):
        """Return a copy with ``payment`` appended."""
        return self.model_copy(update={"payments": self.payments + (payment,)})

    def with_payments(self, payments: tuple[Payment, ...]):
        return self.model_copy(update={"payments": tuple(payments)})

    def find_payment(self, payment_id: str) -> Optional[Payment]:
        for payment in self.payments:
            if payment.id == payment_id:
                return payment
        return None


class LoanItem(ItemBase):
    """Money lent to the counterparty."""

    kind: ClassVar[ItemKind] = ItemKind.LOAN

    principal: Money = Decimal("0")
    interest_rate: Money = Field(default=Decimal("0"), ge=0, description="Percent")
    term: str = Field(default="", max_length=50, description="e.g. '12 meses'")
    monthly_amount: Optional[Amount] = Field(
        default=None,
        description="Installment amount, when tracked"
    )


class RentalItem(ItemBase):
    """A rental collected every month."""

    kind: ClassVar[ItemKind] = ItemKind.RENTAL

    monthly_amount: Money = Decimal("0")
    payment_day: Optional[int] = Field(default=None, ge=1, le=31)


class DebtItem(ItemBase):
    """Money owed by the user."""

    kind: ClassVar[ItemKind] = ItemKind.DEBT

    principal: Money = Decimal("0")
    due_date: Optional[date] = None


class OtherIncomeItem(ItemBase):
    """A one-off or miscellaneous income."""

    kind: ClassVar[ItemKind] = ItemKind.OTHER_INCOME

    principal: Money = Decimal("0")


ITEM_CLASSES: dict[ItemKind, type[ItemBase]] = {
    ItemKind.LOAN: LoanItem,
    ItemKind.RENTAL: RentalItem,
    ItemKind.DEBT: DebtItem,
    ItemKind.OTHER_INCOME: OtherIncomeItem,
}


def _item_kind_tag(value: Any) -> Optional[str]:
    """Pick the variant from the ``type`` key (or an already-built item)."""
    if isinstance(value, ItemBase):
        return value.kind.value
    if isinstance(value, dict):
        raw = value.get("type", value.get("kind"))
        try:
            return ItemKind(raw).value
        except (ValueError, TypeError):
            return None
    return None


FinancialItem = Annotated[
    Union[
        Annotated[LoanItem, Tag(ItemKind.LOAN.value)],
        Annotated[RentalItem, Tag(ItemKind.RENTAL.value)],
        Annotated[DebtItem, Tag(ItemKind.DEBT.value)],
        Annotated[OtherIncomeItem, Tag(ItemKind.OTHER_INCOME.value)],
    ],
    Discriminator(_item_kind_tag),
]

FINANCIAL_ITEM_ADAPTER: TypeAdapter = TypeAdapter(FinancialItem)


def parse_item(data: Any) -> ItemBase:
    """Validate a raw dict into the matching item variant."""
    return FINANCIAL_ITEM_ADAPTER.validate_python(data)


# =============================================================================
# REMINDERS & BANK ACCOUNTS
# =============================================================================

class Reminder(LedgerModel):
    """Free-standing note with a date. Not linked to any item."""

    id: str = Field(default_factory=new_id)
    text: str = Field(..., min_length=1, max_length=500)
    remind_on: date = Field(..., alias="date")
    completed: bool = False

    def toggled(self) -> "Reminder":
        return self.model_copy(update={"completed": not self.completed})


class BankAccount(LedgerModel):
    """
    A savings account.

    The balance is whatever the user typed in; it is not derived from
    any transactions.
    """

    id: str = Field(default_factory=new_id)
    bank_name: str = Field(..., min_length=1, max_length=200)
    account_name: str = Field(..., min_length=1, max_length=200)
    balance: Money = Decimal("0")


def sort_reminders(reminders) -> tuple[Reminder, ...]:
    """Ascending by date; entries on the same date keep their order."""
    return tuple(sorted(reminders, key=lambda r: r.remind_on))


# =============================================================================
# SNAPSHOT
# =============================================================================

class LedgerSnapshot(LedgerModel):
    """
    The whole ledger at one point in time.

    Aggregates are always computed from a snapshot, never cached on it.
    """

    user: Optional[User] = None
    items: tuple[FinancialItem, ...] = ()
    reminders: tuple[Reminder, ...] = ()
    bank_accounts: tuple[BankAccount, ...] = ()

    def find_item(self, item_id: str) -> Optional[ItemBase]:
        for item in self.items:
            if item.id == item_id:
                return item
        return None

    def has_item(self, item_id: str) -> bool:
        return self.find_item(item_id) is not None

    def replace_item(self, updated: ItemBase) -> "LedgerSnapshot":
        items = tuple(updated if item.id == updated.id else item for item in self.items)
        return self.model_copy(update={"items": items})


# =============================================================================
# INVOICES
# =============================================================================

class InvoiceDetails(LedgerModel):
    """What a collection invoice asks for."""

    amount: Money = Field(default=Decimal("0"), ge=0)
    concept: str = Field(..., min_length=1, max_length=300)
    due_date: date
