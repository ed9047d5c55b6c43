"""
Ledger Service

The single owner of the current LedgerSnapshot.

Every mutation follows the same path:
1. Validate the input (drafts go through LedgerValidator)
2. Build a new snapshot; the previous one is never modified
3. Make it current
4. Save it; a StorageError is logged and kept in ``last_save_error``,
   and the in-memory snapshot stays authoritative for the session

Reads (portfolio, dashboard stats, upcoming events, balances) are computed
from the current snapshot on every call.
"""

from datetime import date
from typing import Optional

from pydantic import ValidationError as PydanticValidationError

from finovate.analytics import (
    compute_balance,
    compute_dashboard_stats,
    compute_portfolio,
    upcoming_events,
)
from finovate.audit import AuditLogger
from finovate.config import get_settings
from finovate.errors import IdentityMismatchError, ItemNotFoundError
from finovate.ledger.store import LedgerStore, LoadResult
from finovate.models.analytics import (
    DashboardStats,
    ItemBalance,
    PortfolioSummary,
    UpcomingEvent,
)
from finovate.models.audit import AuditEventBuilder, AuditEventType
from finovate.models.drafts import (
    BankAccountDraft,
    ItemDraft,
    PaymentDraft,
    RegistrationDraft,
    ReminderDraft,
)
from finovate.models.ledger import (
    BankAccount,
    ItemBase,
    LedgerSnapshot,
    Payment,
    Reminder,
    User,
    sort_reminders,
)
from finovate.models.transfer import ImportPlan
from finovate.models.validation import ValidationResult
from finovate.services.storage.interface import StorageError
from finovate.transfer.merge import apply_import
from finovate.validation.validator import (
    LedgerValidator,
    ValidationError,
    pydantic_issues,
)


# Profile fields a user may edit after registration
PROFILE_FIELDS = frozenset({
    "name",
    "age",
    "address",
    "phone",
    "email",
    "occupation",
    "profile_picture",
    "id_document",
})


class Ledger:
    """
    Owned ledger state plus the operations that change it.

    Usage:
        ledger = Ledger.open(LedgerStore(JsonFileStorage()))
        if not ledger.has_user:
            ledger.register(RegistrationDraft(...))
        item = ledger.add_item(ItemDraft(kind=ItemKind.LOAN, ...))
        ledger.add_payment(item.id, PaymentDraft(amount=Decimal("100"), paid_on=today))
    """

    def __init__(
        self,
        store: LedgerStore,
        audit_logger: Optional[AuditLogger] = None,
        validator: Optional[LedgerValidator] = None,
        snapshot: Optional[LedgerSnapshot] = None,
    ):
        self._settings = get_settings().app
        self._store = store
        self._audit = audit_logger or AuditLogger(self._settings.audit_history_size)
        self._validator = validator or LedgerValidator()
        self._snapshot = snapshot or LedgerSnapshot()
        self._unlocked = False
        self._recovery_verified = False
        self.last_save_error: Optional[str] = None

    @classmethod
    def open(
        cls,
        store: LedgerStore,
        audit_logger: Optional[AuditLogger] = None,
    ) -> "Ledger":
        """Create a ledger from whatever the store holds."""
        ledger = cls(store, audit_logger=audit_logger)
        ledger.load()
        return ledger

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def snapshot(self) -> LedgerSnapshot:
        return self._snapshot

    @property
    def user(self) -> Optional[User]:
        return self._snapshot.user

    @property
    def has_user(self) -> bool:
        return self._snapshot.user is not None

    @property
    def is_unlocked(self) -> bool:
        return self._unlocked

    @property
    def audit(self) -> AuditLogger:
        return self._audit

    @property
    def validator(self) -> LedgerValidator:
        return self._validator

    def load(self) -> LoadResult:
        """Replace the current snapshot with the stored one (locked)."""
        result = self._store.load()
        self._snapshot = result.snapshot
        self._unlocked = False
        self._recovery_verified = False

        if result.error:
            self._audit.log(AuditEventBuilder.load_failed(result.error))
        else:
            self._audit.log(AuditEventBuilder.ledger_loaded(
                len(result.snapshot.items), result.has_user
            ))
        return result

    def _commit(self, snapshot: LedgerSnapshot) -> LedgerSnapshot:
        self._snapshot = snapshot
        try:
            self._store.save(snapshot)
        except StorageError as e:
            self.last_save_error = str(e)
            self._audit.log(AuditEventBuilder.save_failed(str(e)))
        else:
            self.last_save_error = None
        return snapshot

    def _build(self, builder, *args):
        """Run a validator builder, auditing any rejection."""
        try:
            return builder(*args)
        except ValidationError as e:
            result = e.result or ValidationResult(subject="input")
            self._audit.log(AuditEventBuilder.validation_failed(
                result.subject,
                [issue.model_dump() for issue in result.issues],
            ))
            raise

    def require_user(self) -> User:
        if self._snapshot.user is None:
            raise IdentityMismatchError("No user is registered")
        return self._snapshot.user

    def require_item(self, item_id: str) -> ItemBase:
        item = self._snapshot.find_item(item_id)
        if item is None:
            raise ItemNotFoundError(f"Item not found: {item_id}")
        return item

    # ------------------------------------------------------------------
    # Account
    # ------------------------------------------------------------------

    def register(self, draft: RegistrationDraft) -> User:
        """
        Register the ledger owner and start a fresh, unlocked ledger.

        Any previously held items, reminders and accounts are dropped.
        """
        user = self._build(self._validator.build_user, draft)
        self._commit(LedgerSnapshot(user=user))
        self._unlocked = True
        self._audit.log(AuditEventBuilder.user_registered(user.id, user.name))
        return user

    def login(self, password: str) -> None:
        """
        Unlock the ledger.

        Raises:
            IdentityMismatchError: Wrong password or no registered user
        """
        user = self._snapshot.user
        success = user is not None and user.check_password(password)
        self._audit.log(AuditEventBuilder.unlock_attempt(
            user.id if user else None, success, "password"
        ))
        if not success:
            raise IdentityMismatchError("Incorrect password")
        self._unlocked = True

    def logout(self) -> None:
        self._unlocked = False

    def verify_recovery_email(self, email: str) -> None:
        """
        First step of password recovery.

        Raises:
            IdentityMismatchError: The email does not match the registered one
        """
        user = self._snapshot.user
        success = user is not None and user.check_email(email)
        self._audit.log(AuditEventBuilder.unlock_attempt(
            user.id if user else None, success, "email"
        ))
        if not success:
            raise IdentityMismatchError("Email does not match the registered user")
        self._recovery_verified = True

    def reset_password(self, new_password: str, confirm_password: str) -> None:
        """
        Replace the password, either while unlocked or after the recovery
        email was verified. The ledger is locked afterwards.
        """
        user = self.require_user()
        if not (self._unlocked or self._recovery_verified):
            raise IdentityMismatchError("Verify the recovery email before resetting the password")

        result = self._validator.validate_new_password(new_password, confirm_password)
        if result.has_errors:
            self._audit.log(AuditEventBuilder.validation_failed(
                result.subject, [issue.model_dump() for issue in result.issues]
            ))
            raise ValidationError("; ".join(result.error_messages), result)

        updated = user.model_copy(update={"password": new_password})
        self._commit(self._snapshot.model_copy(update={"user": updated}))
        self._recovery_verified = False
        self._unlocked = False
        self._audit.log(AuditEventBuilder.user_changed(
            AuditEventType.PASSWORD_RESET, user.id, ["password"]
        ))

    def update_profile(self, **changes) -> User:
        """
        Edit profile fields. The password is changed with reset_password.

        Raises:
            ValidationError: Unknown field or invalid value
        """
        user = self.require_user()
        unknown = sorted(set(changes) - PROFILE_FIELDS)
        if unknown:
            raise ValidationError(f"Cannot update fields: {', '.join(unknown)}")

        data = user.model_dump()
        data.update(changes)
        try:
            updated = User.model_validate(data)
        except PydanticValidationError as e:
            result = ValidationResult(subject="profile", issues=pydantic_issues(e))
            self._audit.log(AuditEventBuilder.validation_failed(
                result.subject, [issue.model_dump() for issue in result.issues]
            ))
            raise ValidationError("Invalid profile", result) from e

        self._commit(self._snapshot.model_copy(update={"user": updated}))
        self._audit.log(AuditEventBuilder.user_changed(
            AuditEventType.PROFILE_UPDATED, user.id, sorted(changes)
        ))
        return updated

    def clear_all(self) -> None:
        """Erase every slot and start over with no user."""
        self._store.clear()
        self._snapshot = LedgerSnapshot()
        self._unlocked = False
        self._recovery_verified = False
        self.last_save_error = None
        self._audit.log(AuditEventBuilder.ledger_cleared())

    # ------------------------------------------------------------------
    # Items and payments
    # ------------------------------------------------------------------

    def add_item(self, draft: ItemDraft) -> ItemBase:
        item = self._build(self._validator.build_item, draft)
        self._commit(self._snapshot.model_copy(
            update={"items": self._snapshot.items + (item,)}
        ))
        self._audit.log(AuditEventBuilder.item_added(item.id, item.kind.value, item.person_name))
        return item

    def delete_item(self, item_id: str) -> None:
        """Remove an item together with all of its payments."""
        item = self.require_item(item_id)
        items = tuple(i for i in self._snapshot.items if i.id != item_id)
        self._commit(self._snapshot.model_copy(update={"items": items}))
        self._audit.log(AuditEventBuilder.item_deleted(item_id, len(item.payments)))

    def add_payment(self, item_id: str, draft: PaymentDraft) -> Payment:
        """
        Append a payment to an item.

        Loan payments default to a capital allocation; payments on other
        kinds never carry one.
        """
        item = self.require_item(item_id)
        payment = self._build(self._validator.build_payment, draft, item)
        self._commit(self._snapshot.replace_item(item.with_payment(payment)))
        self._audit.log(AuditEventBuilder.payment_added(
            item.id,
            payment.id,
            str(payment.amount),
            payment.allocation.value if payment.allocation else None,
        ))
        return payment

    def mark_receipt_generated(self, item_id: str, payment_id: str) -> Payment:
        item = self.require_item(item_id)
        payment = item.find_payment(payment_id)
        if payment is None:
            raise ItemNotFoundError(f"Payment not found: {payment_id}")
        if payment.receipt_generated:
            return payment

        updated = payment.with_receipt_generated()
        payments = tuple(updated if p.id == payment_id else p for p in item.payments)
        self._commit(self._snapshot.replace_item(item.with_payments(payments)))
        self._audit.log(AuditEventBuilder.record_changed(
            AuditEventType.RECEIPT_MARKED, "payment", payment_id, {"item_id": item_id}
        ))
        return updated

    # ------------------------------------------------------------------
    # Reminders
    # ------------------------------------------------------------------

    def _require_reminder(self, reminder_id: str) -> Reminder:
        for reminder in self._snapshot.reminders:
            if reminder.id == reminder_id:
                return reminder
        raise ItemNotFoundError(f"Reminder not found: {reminder_id}")

    def add_reminder(self, text: str, remind_on: date) -> Reminder:
        reminder = self._build(
            self._validator.build_reminder,
            ReminderDraft(text=text, remind_on=remind_on),
        )
        reminders = sort_reminders(self._snapshot.reminders + (reminder,))
        self._commit(self._snapshot.model_copy(update={"reminders": reminders}))
        self._audit.log(AuditEventBuilder.record_changed(
            AuditEventType.REMINDER_ADDED, "reminder", reminder.id,
            {"date": reminder.remind_on.isoformat()},
        ))
        return reminder

    def toggle_reminder(self, reminder_id: str) -> Reminder:
        toggled = self._require_reminder(reminder_id).toggled()
        reminders = tuple(
            toggled if r.id == reminder_id else r for r in self._snapshot.reminders
        )
        self._commit(self._snapshot.model_copy(update={"reminders": reminders}))
        self._audit.log(AuditEventBuilder.record_changed(
            AuditEventType.REMINDER_TOGGLED, "reminder", reminder_id,
            {"completed": toggled.completed},
        ))
        return toggled

    def delete_reminder(self, reminder_id: str) -> None:
        self._require_reminder(reminder_id)
        reminders = tuple(r for r in self._snapshot.reminders if r.id != reminder_id)
        self._commit(self._snapshot.model_copy(update={"reminders": reminders}))
        self._audit.log(AuditEventBuilder.record_changed(
            AuditEventType.REMINDER_DELETED, "reminder", reminder_id
        ))

    # ------------------------------------------------------------------
    # Bank accounts
    # ------------------------------------------------------------------

    def add_account(self, bank_name: str, account_name: str, balance) -> BankAccount:
        account = self._build(
            self._validator.build_bank_account,
            BankAccountDraft(bank_name=bank_name, account_name=account_name, balance=balance),
        )
        self._commit(self._snapshot.model_copy(
            update={"bank_accounts": self._snapshot.bank_accounts + (account,)}
        ))
        self._audit.log(AuditEventBuilder.record_changed(
            AuditEventType.ACCOUNT_ADDED, "bank_account", account.id,
            {"bank_name": account.bank_name},
        ))
        return account

    def delete_account(self, account_id: str) -> None:
        if not any(a.id == account_id for a in self._snapshot.bank_accounts):
            raise ItemNotFoundError(f"Bank account not found: {account_id}")
        accounts = tuple(a for a in self._snapshot.bank_accounts if a.id != account_id)
        self._commit(self._snapshot.model_copy(update={"bank_accounts": accounts}))
        self._audit.log(AuditEventBuilder.record_changed(
            AuditEventType.ACCOUNT_DELETED, "bank_account", account_id
        ))

    # ------------------------------------------------------------------
    # Import
    # ------------------------------------------------------------------

    def commit_import(self, plan: ImportPlan) -> LedgerSnapshot:
        """Apply a confirmed import plan and persist the result."""
        snapshot = self._commit(apply_import(self._snapshot, plan))
        self._audit.log(AuditEventBuilder.import_event(
            AuditEventType.IMPORT_COMMITTED,
            plan.data_type.value,
            {
                "items": len(plan.new_items),
                "reminders": len(plan.new_reminders),
                "bank_accounts": len(plan.new_bank_accounts),
            },
        ))
        return snapshot

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    def portfolio(self) -> PortfolioSummary:
        return compute_portfolio(self._snapshot)

    def dashboard_stats(self) -> DashboardStats:
        return compute_dashboard_stats(self._snapshot)

    def upcoming_events(self, today: Optional[date] = None) -> list[UpcomingEvent]:
        return upcoming_events(
            self._snapshot.items,
            today=today,
            horizon_days=self._settings.upcoming_horizon_days,
            urgent_days=self._settings.urgent_threshold_days,
        )

    def balance_of(self, item_id: str) -> ItemBalance:
        return compute_balance(self.require_item(item_id))
