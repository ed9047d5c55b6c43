"""Tests for the Ledger service and the transfer flow."""

from datetime import date
from decimal import Decimal

import pytest

from finovate.errors import IdentityMismatchError, ItemNotFoundError
from finovate.ledger import Ledger, LedgerStore
from finovate.models import (
    Allocation,
    AuditEventType,
    ItemDraft,
    ItemKind,
    LedgerSnapshot,
    PaymentDraft,
)
from finovate.orchestrator import TransferFlow, create_app_components
from finovate.services.documents import DocumentOutputError
from finovate.services.storage import InMemoryStorage
from finovate.transfer import export_full_backup, export_single_item
from finovate.validation import DuplicateItemError, ValidationError


def _loan_draft(**overrides) -> ItemDraft:
    fields = dict(
        kind=ItemKind.LOAN,
        person_name="Carlos Ruiz",
        description="Moto",
        start_date=date(2024, 1, 15),
        principal=Decimal("1000"),
        interest_rate=Decimal("5"),
        term="12 meses",
    )
    fields.update(overrides)
    return ItemDraft(**fields)


class TestAccount:
    """Registration, unlock and recovery."""

    def test_register_unlocks_fresh_ledger(self, store, registration):
        """Test that registration starts an empty, unlocked ledger."""
        ledger = Ledger(store)
        user = ledger.register(registration)
        assert ledger.is_unlocked
        assert ledger.user == user
        assert ledger.snapshot.items == ()
        assert store.load().has_user

    def test_login(self, ledger):
        """Test unlocking with the right password."""
        ledger.logout()
        assert not ledger.is_unlocked
        ledger.login("1234")
        assert ledger.is_unlocked

    def test_wrong_password(self, ledger):
        """Test that a wrong password is rejected and audited."""
        ledger.logout()
        with pytest.raises(IdentityMismatchError):
            ledger.login("0000")
        assert not ledger.is_unlocked
        assert ledger.audit.recent_events(1)[0].event_type == AuditEventType.UNLOCK_FAILED

    def test_login_without_user(self, store):
        """Test that login fails when nobody is registered."""
        with pytest.raises(IdentityMismatchError):
            Ledger(store).login("1234")

    def test_password_recovery(self, ledger):
        """Test email check followed by a reset."""
        ledger.logout()
        ledger.verify_recovery_email("ana@example.com")
        ledger.reset_password("abcd", "abcd")
        assert not ledger.is_unlocked
        ledger.login("abcd")
        assert ledger.is_unlocked

    def test_recovery_wrong_email(self, ledger):
        """Test that an unknown email stops recovery."""
        ledger.logout()
        with pytest.raises(IdentityMismatchError):
            ledger.verify_recovery_email("someone@example.com")
        with pytest.raises(IdentityMismatchError):
            ledger.reset_password("abcd", "abcd")

    def test_reset_password_rules(self, ledger):
        """Test the minimum length and confirmation rules."""
        with pytest.raises(ValidationError):
            ledger.reset_password("abc", "abc")
        with pytest.raises(ValidationError):
            ledger.reset_password("abcd", "abce")

    def test_update_profile(self, ledger):
        """Test editing profile fields."""
        updated = ledger.update_profile(phone="3200000000", id_document="CC-1")
        assert updated.phone == "3200000000"
        assert ledger.user.id_document == "CC-1"
        assert ledger.user.check_password("1234")

    def test_update_profile_rejects_password(self, ledger):
        """Test that the password is not a profile field."""
        with pytest.raises(ValidationError):
            ledger.update_profile(password="x")

    def test_clear_all(self, ledger, storage):
        """Test wiping every slot."""
        ledger.add_item(_loan_draft())
        ledger.clear_all()
        assert not ledger.has_user
        assert ledger.snapshot == LedgerSnapshot()
        assert storage.keys() == []


class TestItemsAndPayments:
    """Item and payment mutations."""

    def test_add_item_persists(self, ledger, store):
        """Test that a new item is saved."""
        item = ledger.add_item(_loan_draft())
        assert ledger.snapshot.items == (item,)
        assert store.load().snapshot.items == (item,)

    def test_mutation_returns_new_snapshot(self, ledger):
        """Test that earlier snapshots are never modified."""
        before = ledger.snapshot
        ledger.add_item(_loan_draft())
        assert before.items == ()
        assert ledger.snapshot is not before

    def test_invalid_draft_is_audited(self, ledger):
        """Test that validation failures are logged and nothing changes."""
        with pytest.raises(ValidationError):
            ledger.add_item(ItemDraft(kind=ItemKind.DEBT))
        assert ledger.snapshot.items == ()
        assert ledger.audit.recent_events(1)[0].event_type == AuditEventType.VALIDATION_FAILED

    def test_add_payment_and_balance(self, ledger):
        """Test principal 1000 with capital and interest payments."""
        item = ledger.add_item(_loan_draft())
        ledger.add_payment(item.id, PaymentDraft(amount=Decimal("500"), paid_on=date(2024, 2, 15)))
        ledger.add_payment(item.id, PaymentDraft(
            amount=Decimal("50"), paid_on=date(2024, 2, 15), allocation=Allocation.INTEREST
        ))
        balance = ledger.balance_of(item.id)
        assert balance.balance == Decimal("500")
        assert balance.total_paid == Decimal("550")

    def test_payment_order_is_entry_order(self, ledger):
        """Test that payments are kept as entered, not by date."""
        item = ledger.add_item(_loan_draft())
        late = ledger.add_payment(item.id, PaymentDraft(amount=Decimal("1"), paid_on=date(2024, 3, 1)))
        early = ledger.add_payment(item.id, PaymentDraft(amount=Decimal("2"), paid_on=date(2024, 2, 1)))
        assert ledger.snapshot.find_item(item.id).payments == (late, early)

    def test_delete_item_cascades_payments(self, ledger):
        """Test that deleting an item removes its payments."""
        item = ledger.add_item(_loan_draft())
        ledger.add_payment(item.id, PaymentDraft(amount=Decimal("1"), paid_on=date(2024, 3, 1)))
        ledger.delete_item(item.id)
        assert ledger.snapshot.items == ()

    def test_unknown_item(self, ledger):
        """Test operations on ids that do not exist."""
        with pytest.raises(ItemNotFoundError):
            ledger.delete_item("missing")
        with pytest.raises(ItemNotFoundError):
            ledger.add_payment("missing", PaymentDraft(amount=Decimal("1"), paid_on=date(2024, 1, 1)))

    def test_mark_receipt_generated(self, ledger):
        """Test the receipt flag update."""
        item = ledger.add_item(_loan_draft())
        payment = ledger.add_payment(item.id, PaymentDraft(amount=Decimal("1"), paid_on=date(2024, 3, 1)))
        flagged = ledger.mark_receipt_generated(item.id, payment.id)
        assert flagged.receipt_generated
        assert ledger.snapshot.find_item(item.id).payments[0].receipt_generated

    def test_save_failure_keeps_memory_state(self, ledger, storage):
        """Test that a failing store does not lose the mutation."""
        storage.fail_writes = True
        item = ledger.add_item(_loan_draft())
        assert ledger.snapshot.find_item(item.id) is not None
        assert ledger.last_save_error
        assert ledger.audit.recent_events(
            1, event_type=AuditEventType.SAVE_FAILED
        )

        storage.fail_writes = False
        ledger.add_item(_loan_draft(person_name="Otro"))
        assert ledger.last_save_error is None

    def test_reopen_restores_state(self, ledger, store):
        """Test that a new session sees the saved ledger, locked."""
        item = ledger.add_item(_loan_draft())
        reopened = Ledger.open(store)
        assert reopened.snapshot.items == (item,)
        assert reopened.has_user
        assert not reopened.is_unlocked


class TestRemindersAndAccounts:
    """Reminders and bank accounts."""

    def test_reminders_kept_sorted(self, ledger):
        """Test that reminders stay ordered by date."""
        ledger.add_reminder("Segundo", date(2024, 4, 2))
        ledger.add_reminder("Primero", date(2024, 4, 1))
        assert [r.text for r in ledger.snapshot.reminders] == ["Primero", "Segundo"]

    def test_toggle_and_delete_reminder(self, ledger):
        """Test reminder completion and removal."""
        reminder = ledger.add_reminder("Llamar", date(2024, 4, 1))
        assert ledger.toggle_reminder(reminder.id).completed
        ledger.delete_reminder(reminder.id)
        assert ledger.snapshot.reminders == ()
        with pytest.raises(ItemNotFoundError):
            ledger.toggle_reminder(reminder.id)

    def test_accounts_and_portfolio(self, ledger):
        """Test that savings feed the portfolio."""
        account = ledger.add_account("Banco Uno", "Ahorros", Decimal("250"))
        ledger.add_item(ItemDraft(
            kind=ItemKind.DEBT,
            person_name="Banco",
            start_date=date(2024, 1, 1),
            principal=Decimal("1000"),
        ))
        assert ledger.portfolio().net_worth == Decimal("-750")
        assert ledger.dashboard_stats().total_debt == Decimal("1000")
        ledger.delete_account(account.id)
        assert ledger.portfolio().total_savings == Decimal("0")

    def test_upcoming_events(self, ledger, today):
        """Test the projection through the service."""
        ledger.add_item(ItemDraft(
            kind=ItemKind.RENTAL,
            person_name="Lucía",
            start_date=date(2023, 1, 1),
            monthly_amount=Decimal("800"),
            payment_day=15,
        ))
        events = ledger.upcoming_events(today)
        assert [e.due_on for e in events] == [date(2024, 4, 15)]


class TestTransferFlow:
    """Import with confirmation."""

    def test_export_import_through_flow(self, ledger, store, registration):
        """Test a full backup moved into another ledger."""
        ledger.add_item(_loan_draft())
        ledger.add_reminder("Llamar", date(2024, 4, 1))
        filename, text = TransferFlow(ledger).export_all(today=date(2024, 3, 20))
        assert filename == "finovate-backup-2024-03-20.json"

        other = Ledger(LedgerStore(InMemoryStorage()))
        other.register(registration)
        merged = TransferFlow(other).import_document(text, confirm=lambda plan: True)
        assert [i.id for i in merged.items] == [i.id for i in ledger.snapshot.items]
        assert other.user.id != ledger.user.id

    def test_declined_import_changes_nothing(self, ledger):
        """Test that answering no leaves the ledger untouched."""
        text = export_full_backup(LedgerSnapshot(items=(
            ledger.validator.build_item(_loan_draft()),
        )))
        before = ledger.snapshot
        assert TransferFlow(ledger).import_document(text, confirm=lambda plan: False) is None
        assert ledger.snapshot == before
        assert ledger.audit.recent_events(1)[0].event_type == AuditEventType.IMPORT_DECLINED

    def test_duplicate_single_item_rejected_before_confirmation(self, ledger):
        """Test that the duplicate check happens before asking."""
        item = ledger.add_item(_loan_draft())
        text = export_single_item(ledger.snapshot, item.id)
        asked = []
        with pytest.raises(DuplicateItemError):
            TransferFlow(ledger).import_document(text, confirm=asked.append)
        assert asked == []
        assert ledger.audit.recent_events(1)[0].event_type == AuditEventType.IMPORT_REJECTED

    def test_export_item_filename(self, ledger):
        """Test the single-item export through the flow."""
        item = ledger.add_item(_loan_draft(person_name="Carlos Ruiz"))
        filename, _ = TransferFlow(ledger).export_item(item.id)
        assert filename == "finovate-item-Carlos_Ruiz.json"

    def test_write_export(self, ledger, tmp_path):
        """Test writing an export next to the documents."""
        flow = TransferFlow(ledger)
        filename, text = flow.export_all(today=date(2024, 3, 20))
        path = flow.write_export(filename, text)
        assert path == tmp_path / "documents" / "finovate-backup-2024-03-20.json"
        assert path.read_text(encoding="utf-8") == text

    def test_write_export_failure(self, ledger, tmp_path):
        """Test that an unwritable destination raises a ledger error."""
        blocked = tmp_path / "blocked"
        blocked.write_text("not a directory")
        flow = TransferFlow(ledger)
        filename, text = flow.export_all(today=date(2024, 3, 20))
        with pytest.raises(DocumentOutputError):
            flow.write_export(filename, text, directory=blocked)


class TestAppComponents:
    """Factory wiring."""

    def test_create_app_components_in_memory(self):
        """Test an in-memory session."""
        ledger, documents, transfers = create_app_components(use_storage=False)
        assert not ledger.has_user
        assert documents is not None
        assert transfers is not None

    def test_create_app_components_on_disk(self, tmp_path, registration):
        """Test that a file-backed session survives a restart."""
        ledger, _, _ = create_app_components(data_dir=tmp_path)
        ledger.register(registration)
        reopened, _, _ = create_app_components(data_dir=tmp_path)
        assert reopened.has_user
        assert reopened.user == ledger.user
