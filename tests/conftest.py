"""
Shared fixtures.

Every test runs with storage and document output pointed at a temporary
directory, and with a fixed "today" so date projections are deterministic.
"""

from datetime import date
from decimal import Decimal

import pytest

from finovate.config import get_settings
from finovate.ledger import Ledger, LedgerStore
from finovate.models import (
    Allocation,
    BankAccount,
    DebtItem,
    LoanItem,
    OtherIncomeItem,
    Payment,
    RegistrationDraft,
    Reminder,
    RentalItem,
    User,
)
from finovate.services.storage import InMemoryStorage


# Wednesday; March 2024 has 31 days
TODAY = date(2024, 3, 20)


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    monkeypatch.setenv("FINOVATE_STORAGE_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("FINOVATE_DOCUMENTS_OUTPUT_DIR", str(tmp_path / "documents"))
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def user() -> User:
    return User(
        name="Ana Torres",
        age=34,
        address="Calle 10 #5-20",
        phone="3001234567",
        email="ana@example.com",
        occupation="Ingeniera",
        password="1234",
    )


@pytest.fixture
def registration() -> RegistrationDraft:
    return RegistrationDraft(
        name="Ana Torres",
        age=34,
        address="Calle 10 #5-20",
        phone="3001234567",
        email="ana@example.com",
        occupation="Ingeniera",
        password="1234",
        confirm_password="1234",
    )


@pytest.fixture
def loan() -> LoanItem:
    return LoanItem(
        person_name="Carlos Ruiz",
        person_id="CC-7788",
        person_phone="3110000000",
        description="Préstamo para moto",
        start_date=date(2024, 1, 15),
        principal=Decimal("1000"),
        interest_rate=Decimal("5"),
        term="12 meses",
        payments=(
            Payment(amount=Decimal("500"), paid_on=date(2024, 2, 15), allocation=Allocation.CAPITAL),
            Payment(amount=Decimal("50"), paid_on=date(2024, 2, 15), allocation=Allocation.INTEREST),
        ),
    )


@pytest.fixture
def rental() -> RentalItem:
    return RentalItem(
        person_name="Lucía Gómez",
        description="Apartamento centro",
        start_date=date(2023, 6, 1),
        monthly_amount=Decimal("800"),
        payment_day=15,
    )


@pytest.fixture
def debt() -> DebtItem:
    return DebtItem(
        person_name="Banco Local",
        description="Tarjeta",
        start_date=date(2024, 1, 1),
        principal=Decimal("300"),
        due_date=date(2024, 3, 25),
    )


@pytest.fixture
def other_income() -> OtherIncomeItem:
    return OtherIncomeItem(
        person_name="Cliente",
        description="Consultoría",
        start_date=date(2024, 2, 1),
        principal=Decimal("450"),
    )


@pytest.fixture
def bank_account() -> BankAccount:
    return BankAccount(bank_name="Banco Uno", account_name="Ahorros 001", balance=Decimal("2000"))


@pytest.fixture
def reminder() -> Reminder:
    return Reminder(text="Llamar a Carlos", remind_on=date(2024, 3, 22))


@pytest.fixture
def storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture
def store(storage) -> LedgerStore:
    return LedgerStore(storage)


@pytest.fixture
def ledger(store, registration) -> Ledger:
    """A registered, unlocked ledger on in-memory storage."""
    ledger = Ledger(store)
    ledger.register(registration)
    return ledger
