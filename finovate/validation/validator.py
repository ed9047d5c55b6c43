"""
Draft Validation

DESIGN DECISION: Validation happens in two distinct stages:

STAGE 1 - REQUIRED FIELDS:
- Presence of the fields a record of this kind cannot exist without
- Basic ranges (positive amounts, day of month 1-31)

STAGE 2 - CONSISTENCY:
- Dates that contradict each other
- Values that are legal but probably a typo
- Fields that will be ignored for this kind of record

Stage 2 only runs when stage 1 passes.

IMPORTANT: Validation NEVER silently fixes issues. It reports them, and
the build_* helpers refuse to produce a record while any error remains.
"""

from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import ValidationError as PydanticValidationError

from finovate.config import get_settings
from finovate.errors import FinovateError
from finovate.models.drafts import (
    BankAccountDraft,
    ItemDraft,
    PaymentDraft,
    RegistrationDraft,
    ReminderDraft,
)
from finovate.models.ledger import (
    Allocation,
    BankAccount,
    ITEM_CLASSES,
    ItemBase,
    ItemKind,
    LoanItem,
    Payment,
    Reminder,
    User,
)
from finovate.models.validation import ValidationIssue, ValidationResult


class ValidationError(FinovateError):
    """
    Input was rejected.

    ``result`` carries every issue found when the rejection came from a
    draft; import rejections only carry a message.
    """

    def __init__(self, message: str, result: Optional[ValidationResult] = None):
        super().__init__(message)
        self.result = result


class DuplicateItemError(ValidationError):
    """A single-item import collides with an item already in the ledger."""
    pass


def _missing(field: str, message: str, fix: Optional[str] = None) -> ValidationIssue:
    return ValidationIssue(
        field=field,
        issue_type="missing",
        message=message,
        severity="error",
        suggested_fix=fix,
    )


def _blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def pydantic_issues(error: PydanticValidationError) -> list[ValidationIssue]:
    """Translate a pydantic error into our issue list."""
    issues = []
    for detail in error.errors():
        location = ".".join(str(part) for part in detail.get("loc", ())) or "document"
        issues.append(ValidationIssue(
            field=location,
            issue_type=detail.get("type", "invalid_value"),
            message=f"{location}: {detail.get('msg', 'invalid value')}",
            severity="error",
        ))
    return issues


class LedgerValidator:
    """
    Validates form drafts before they become ledger records.

    Stage 1: Required fields (no context needed)
    Stage 2: Consistency checks
    """

    def __init__(self):
        self._settings = get_settings().app

    # ------------------------------------------------------------------
    # Items
    # ------------------------------------------------------------------

    def _item_required(self, draft: ItemDraft) -> list[ValidationIssue]:
        issues = []

        if _blank(draft.person_name):
            issues.append(_missing(
                "person_name",
                "Counterparty name is required",
                "Enter who the record is with",
            ))
        if draft.start_date is None:
            issues.append(_missing("start_date", "Start date is required"))

        if draft.kind in (ItemKind.LOAN, ItemKind.DEBT, ItemKind.OTHER_INCOME):
            if draft.principal is None:
                issues.append(_missing("principal", "Amount is required"))
            elif draft.principal <= 0:
                issues.append(ValidationIssue(
                    field="principal",
                    issue_type="invalid_value",
                    message="Amount must be greater than zero",
                    severity="error",
                ))

        if draft.kind == ItemKind.LOAN:
            if draft.interest_rate is not None and draft.interest_rate < 0:
                issues.append(ValidationIssue(
                    field="interest_rate",
                    issue_type="invalid_value",
                    message="Interest rate cannot be negative",
                    severity="error",
                ))

        if draft.kind == ItemKind.RENTAL:
            if draft.monthly_amount is None:
                issues.append(_missing("monthly_amount", "Monthly amount is required"))
            elif draft.monthly_amount <= 0:
                issues.append(ValidationIssue(
                    field="monthly_amount",
                    issue_type="invalid_value",
                    message="Monthly amount must be greater than zero",
                    severity="error",
                ))
            if draft.payment_day is not None and not 1 <= draft.payment_day <= 31:
                issues.append(ValidationIssue(
                    field="payment_day",
                    issue_type="invalid_value",
                    message="Payment day must be between 1 and 31",
                    severity="error",
                ))

        return issues

    def _item_consistency(self, draft: ItemDraft) -> list[ValidationIssue]:
        issues = []

        if draft.kind == ItemKind.LOAN and draft.interest_rate is None:
            issues.append(ValidationIssue(
                field="interest_rate",
                issue_type="defaulted",
                message="No interest rate given; 0% will be recorded",
                severity="warning",
            ))

        if draft.kind == ItemKind.RENTAL and draft.payment_day is None:
            issues.append(ValidationIssue(
                field="payment_day",
                issue_type="missing",
                message="No payment day; this rental will not appear in upcoming collections",
                severity="warning",
            ))

        if draft.kind == ItemKind.DEBT:
            if draft.due_date is None:
                issues.append(ValidationIssue(
                    field="due_date",
                    issue_type="missing",
                    message="No due date; this debt will not appear in upcoming payments",
                    severity="warning",
                ))
            elif draft.start_date and draft.due_date < draft.start_date:
                issues.append(ValidationIssue(
                    field="due_date",
                    issue_type="inconsistent",
                    message="Due date is before the start date",
                    severity="warning",
                    suggested_fix="Please verify both dates",
                ))

        if draft.kind != ItemKind.RENTAL and draft.payment_day is not None:
            issues.append(ValidationIssue(
                field="payment_day",
                issue_type="ignored",
                message="Payment day only applies to rentals and will be ignored",
                severity="info",
            ))

        return issues

    def validate_item(self, draft: ItemDraft) -> ValidationResult:
        issues = self._item_required(draft)
        if not any(issue.severity == "error" for issue in issues):
            issues.extend(self._item_consistency(draft))
        return ValidationResult(subject="item", issues=issues)

    def build_item(self, draft: ItemDraft) -> ItemBase:
        """
        Turn a valid draft into the matching item variant.

        Raises:
            ValidationError: If the draft has any error-level issue
        """
        result = self.validate_item(draft)
        self._raise_for(result)

        common = dict(
            person_name=draft.person_name,
            person_id=draft.person_id or None,
            person_phone=draft.person_phone or None,
            description=draft.description,
            start_date=draft.start_date,
        )
        if draft.kind == ItemKind.LOAN:
            fields = dict(
                principal=draft.principal,
                interest_rate=draft.interest_rate or Decimal("0"),
                term=draft.term,
                monthly_amount=draft.monthly_amount,
            )
        elif draft.kind == ItemKind.RENTAL:
            fields = dict(monthly_amount=draft.monthly_amount, payment_day=draft.payment_day)
        elif draft.kind == ItemKind.DEBT:
            fields = dict(principal=draft.principal, due_date=draft.due_date)
        else:
            fields = dict(principal=draft.principal)

        return self._construct(ITEM_CLASSES[draft.kind], "item", **common, **fields)

    # ------------------------------------------------------------------
    # Payments
    # ------------------------------------------------------------------

    def validate_payment(self, draft: PaymentDraft, item: ItemBase) -> ValidationResult:
        issues = []

        if draft.amount is None:
            issues.append(_missing("amount", "Payment amount is required"))
        elif draft.amount <= 0:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message="Payment amount must be greater than zero",
                severity="error",
            ))
        if draft.paid_on is None:
            issues.append(_missing("paid_on", "Payment date is required"))

        if not any(issue.severity == "error" for issue in issues):
            if draft.paid_on < item.start_date:
                issues.append(ValidationIssue(
                    field="paid_on",
                    issue_type="inconsistent",
                    message="Payment date is before the record's start date",
                    severity="warning",
                ))
            if not isinstance(item, LoanItem) and draft.allocation is not None:
                issues.append(ValidationIssue(
                    field="allocation",
                    issue_type="ignored",
                    message="Capital/interest allocation only applies to loans and will be ignored",
                    severity="info",
                ))

        return ValidationResult(subject="payment", issues=issues)

    def build_payment(self, draft: PaymentDraft, item: ItemBase) -> Payment:
        """
        Loan payments always carry an allocation (capital unless told
        otherwise); other kinds never do.
        """
        self._raise_for(self.validate_payment(draft, item))

        allocation = None
        if isinstance(item, LoanItem):
            allocation = draft.allocation or Allocation.CAPITAL

        return self._construct(
            Payment,
            "payment",
            amount=draft.amount,
            paid_on=draft.paid_on,
            method=draft.method or "Efectivo",
            allocation=allocation,
        )

    # ------------------------------------------------------------------
    # Reminders & bank accounts
    # ------------------------------------------------------------------

    def build_reminder(self, draft: ReminderDraft) -> Reminder:
        issues = []
        if _blank(draft.text):
            issues.append(_missing("text", "Reminder text is required"))
        if draft.remind_on is None:
            issues.append(_missing("remind_on", "Reminder date is required"))
        self._raise_for(ValidationResult(subject="reminder", issues=issues))

        return self._construct(Reminder, "reminder", text=draft.text, remind_on=draft.remind_on)

    def build_bank_account(self, draft: BankAccountDraft) -> BankAccount:
        issues = []
        if _blank(draft.bank_name):
            issues.append(_missing("bank_name", "Bank name is required"))
        if _blank(draft.account_name):
            issues.append(_missing("account_name", "Account name is required"))
        if draft.balance is None:
            issues.append(_missing("balance", "Current balance is required"))
        self._raise_for(ValidationResult(subject="bank_account", issues=issues))

        return self._construct(
            BankAccount,
            "bank_account",
            bank_name=draft.bank_name,
            account_name=draft.account_name,
            balance=draft.balance,
        )

    # ------------------------------------------------------------------
    # Account
    # ------------------------------------------------------------------

    def build_user(self, draft: RegistrationDraft) -> User:
        """Every profile field is required and both passwords must match."""
        issues = []
        for field in ("name", "address", "phone", "email", "occupation"):
            if _blank(getattr(draft, field)):
                issues.append(_missing(field, f"{field.capitalize()} is required"))
        if draft.age is None:
            issues.append(_missing("age", "Age is required"))
        if not draft.password:
            issues.append(_missing("password", "Password is required"))
        elif draft.password != draft.confirm_password:
            issues.append(ValidationIssue(
                field="confirm_password",
                issue_type="mismatch",
                message="Passwords do not match",
                severity="error",
            ))
        self._raise_for(ValidationResult(subject="registration", issues=issues))

        return self._construct(
            User,
            "registration",
            name=draft.name,
            age=draft.age,
            address=draft.address,
            phone=draft.phone,
            email=draft.email,
            occupation=draft.occupation,
            password=draft.password,
        )

    def validate_new_password(self, password: str, confirm_password: str) -> ValidationResult:
        issues = []
        minimum = self._settings.min_password_length
        if len(password or "") < minimum:
            issues.append(ValidationIssue(
                field="password",
                issue_type="too_short",
                message=f"Password must be at least {minimum} characters",
                severity="error",
            ))
        elif password != confirm_password:
            issues.append(ValidationIssue(
                field="confirm_password",
                issue_type="mismatch",
                message="Passwords do not match",
                severity="error",
            ))
        return ValidationResult(subject="password", issues=issues)

    # ------------------------------------------------------------------

    def _construct(self, model, subject: str, **fields):
        try:
            return model(**fields)
        except PydanticValidationError as e:
            result = ValidationResult(subject=subject, issues=pydantic_issues(e))
            raise ValidationError(f"Invalid {subject}", result) from e

    def _raise_for(self, result: ValidationResult) -> None:
        if result.has_errors:
            raise ValidationError(
                "; ".join(result.error_messages),
                result,
            )
