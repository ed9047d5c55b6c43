"""Tests for draft validation."""

from datetime import date
from decimal import Decimal

import pytest

from finovate.models import (
    Allocation,
    BankAccountDraft,
    DebtItem,
    ItemDraft,
    ItemKind,
    LoanItem,
    OtherIncomeItem,
    PaymentDraft,
    RegistrationDraft,
    ReminderDraft,
    RentalItem,
)
from finovate.validation import LedgerValidator, ValidationError


@pytest.fixture
def validator() -> LedgerValidator:
    return LedgerValidator()


class TestItemValidation:
    """Stage 1 and stage 2 checks on item drafts."""

    def test_build_each_kind(self, validator):
        """Test that each kind produces its own variant."""
        common = dict(person_name="Carlos", start_date=date(2024, 1, 1))
        loan = validator.build_item(ItemDraft(kind=ItemKind.LOAN, principal=Decimal("1000"), **common))
        rental = validator.build_item(ItemDraft(
            kind=ItemKind.RENTAL, monthly_amount=Decimal("500"), payment_day=5, **common
        ))
        debt = validator.build_item(ItemDraft(kind=ItemKind.DEBT, principal=Decimal("200"), **common))
        other = validator.build_item(ItemDraft(
            kind=ItemKind.OTHER_INCOME, principal=Decimal("50"), **common
        ))
        assert isinstance(loan, LoanItem)
        assert loan.interest_rate == Decimal("0")
        assert isinstance(rental, RentalItem)
        assert rental.payment_day == 5
        assert isinstance(debt, DebtItem)
        assert isinstance(other, OtherIncomeItem)
        assert loan.payments == ()

    def test_missing_required_fields(self, validator):
        """Test that all missing fields are reported together."""
        result = validator.validate_item(ItemDraft(kind=ItemKind.LOAN))
        assert result.has_errors
        fields = {issue.field for issue in result.issues}
        assert {"person_name", "start_date", "principal"} <= fields

    def test_build_raises_with_result(self, validator):
        """Test that build_item refuses an invalid draft."""
        with pytest.raises(ValidationError) as excinfo:
            validator.build_item(ItemDraft(kind=ItemKind.RENTAL, person_name="X"))
        assert excinfo.value.result is not None
        assert excinfo.value.result.error_count >= 2

    def test_non_positive_principal(self, validator):
        """Test that zero principal is an error."""
        result = validator.validate_item(ItemDraft(
            kind=ItemKind.DEBT, person_name="X", start_date=date(2024, 1, 1), principal=Decimal("0")
        ))
        assert result.has_errors

    def test_rental_without_payment_day_warns(self, validator):
        """Test that the missing payment day is a warning, not an error."""
        result = validator.validate_item(ItemDraft(
            kind=ItemKind.RENTAL,
            person_name="X",
            start_date=date(2024, 1, 1),
            monthly_amount=Decimal("100"),
        ))
        assert result.is_valid
        assert any("upcoming" in warning for warning in result.warnings)

    def test_debt_due_before_start_warns(self, validator):
        """Test the date consistency check."""
        result = validator.validate_item(ItemDraft(
            kind=ItemKind.DEBT,
            person_name="X",
            start_date=date(2024, 5, 1),
            principal=Decimal("100"),
            due_date=date(2024, 4, 1),
        ))
        assert result.is_valid
        assert result.warnings

    def test_error_message_lists_issues(self, validator):
        """Test that the raised message names every blocking issue."""
        with pytest.raises(ValidationError) as excinfo:
            validator.build_item(ItemDraft(kind=ItemKind.LOAN))
        assert "Counterparty name is required" in str(excinfo.value)
        assert "Start date is required" in str(excinfo.value)


class TestPaymentValidation:
    """Payment drafts."""

    def test_loan_payment_defaults_to_capital(self, validator, loan):
        """Test that loan payments get a capital allocation by default."""
        payment = validator.build_payment(
            PaymentDraft(amount=Decimal("100"), paid_on=date(2024, 3, 1)), loan
        )
        assert payment.allocation == Allocation.CAPITAL
        assert payment.method == "Efectivo"

    def test_loan_interest_payment(self, validator, loan):
        """Test an explicit interest allocation."""
        payment = validator.build_payment(
            PaymentDraft(amount=Decimal("10"), paid_on=date(2024, 3, 1), allocation=Allocation.INTEREST),
            loan,
        )
        assert payment.allocation == Allocation.INTEREST

    def test_allocation_dropped_for_non_loans(self, validator, rental):
        """Test that other kinds never carry an allocation."""
        draft = PaymentDraft(amount=Decimal("800"), paid_on=date(2024, 3, 15), allocation=Allocation.CAPITAL)
        assert validator.validate_payment(draft, rental).issues[0].severity == "info"
        assert validator.build_payment(draft, rental).allocation is None

    def test_missing_amount(self, validator, rental):
        """Test that amount and date are required."""
        with pytest.raises(ValidationError):
            validator.build_payment(PaymentDraft(), rental)


class TestOtherDrafts:
    """Reminders, bank accounts and registration."""

    def test_reminder_requires_text(self, validator):
        """Test reminder validation."""
        with pytest.raises(ValidationError):
            validator.build_reminder(ReminderDraft(text="  ", remind_on=date(2024, 1, 1)))

    def test_bank_account(self, validator):
        """Test bank account creation."""
        account = validator.build_bank_account(
            BankAccountDraft(bank_name="B", account_name="A", balance=Decimal("5"))
        )
        assert account.balance == Decimal("5")

    def test_registration(self, validator, registration):
        """Test that a complete registration builds a user."""
        user = validator.build_user(registration)
        assert user.name == "Ana Torres"
        assert user.check_password("1234")

    def test_registration_password_mismatch(self, validator, registration):
        """Test that both passwords must match."""
        draft = registration.model_copy(update={"confirm_password": "9999"})
        with pytest.raises(ValidationError, match="Passwords do not match"):
            validator.build_user(draft)

    def test_registration_missing_fields(self, validator):
        """Test that every profile field is required."""
        with pytest.raises(ValidationError) as excinfo:
            validator.build_user(RegistrationDraft(password="1", confirm_password="1"))
        assert excinfo.value.result.error_count == 6

    def test_new_password_minimum_length(self, validator):
        """Test the reset password length rule."""
        assert validator.validate_new_password("123", "123").has_errors
        assert validator.validate_new_password("1234", "1235").has_errors
        assert validator.validate_new_password("1234", "1234").is_valid
