"""Tests for slot storage and the ledger store."""

import json
from datetime import date

import pytest

from finovate.ledger import LedgerStore
from finovate.models import Allocation, LedgerSnapshot, LoanItem, RentalItem
from finovate.services.storage import (
    InMemoryStorage,
    JsonFileStorage,
    SlotDecodeError,
    StorageError,
)


class TestLedgerStore:
    """Load / save of the four slots."""

    def test_round_trip(self, store, user, loan, rental, reminder, bank_account):
        """Test that a saved snapshot loads back equal."""
        snapshot = LedgerSnapshot(
            user=user,
            items=(loan, rental),
            reminders=(reminder,),
            bank_accounts=(bank_account,),
        )
        store.save(snapshot)
        result = store.load()
        assert result.has_user is True
        assert result.error is None
        assert result.snapshot == snapshot

    def test_slot_keys(self, storage, store, user):
        """Test the prefixed slot names."""
        store.save(LedgerSnapshot(user=user))
        assert storage.keys() == [
            "finovate_accounts",
            "finovate_items",
            "finovate_reminders",
            "finovate_user",
        ]

    def test_user_slot_skipped_without_user(self, storage, store, loan):
        """Test that the user slot is only written when a user exists."""
        store.save(LedgerSnapshot(items=(loan,)))
        assert storage.read("finovate_user") is None
        assert json.loads(storage.read("finovate_items"))[0]["id"] == loan.id

    def test_empty_storage(self, store):
        """Test that nothing stored means an empty ledger without user."""
        result = store.load()
        assert result.has_user is False
        assert result.snapshot == LedgerSnapshot()

    def test_corrupt_slot_falls_back_to_empty(self, storage, store, user):
        """Test that unreadable JSON gives an empty ledger."""
        store.save(LedgerSnapshot(user=user))
        storage.write("finovate_items", "{not json")
        result = store.load()
        assert result.has_user is False
        assert result.snapshot == LedgerSnapshot()
        assert result.error

    def test_schema_mismatch_falls_back_to_empty(self, storage, store):
        """Test that a slot with the wrong shape gives an empty ledger."""
        storage.write("finovate_items", json.dumps([{"type": "loan"}]))
        result = store.load()
        assert result.snapshot.items == ()
        assert result.error

    def test_legacy_slot_layout(self):
        """Test slots written by the first release (Spanish labels, 'interes')."""
        storage = InMemoryStorage({
            "finovate_items": json.dumps([{
                "id": "abc",
                "type": "Préstamo",
                "personName": "Carlos",
                "description": "Moto",
                "principal": 1000,
                "interestRate": 5,
                "term": "12 meses",
                "startDate": "2024-01-15",
                "payments": [{
                    "id": "p1",
                    "amount": 50,
                    "date": "2024-02-15",
                    "method": "Efectivo",
                    "receiptGenerated": False,
                    "allocation": "interes",
                }],
            }, {
                "id": "def",
                "type": "Arriendo",
                "personName": "Lucía",
                "description": "Apto",
                "monthlyAmount": 800,
                "paymentDay": 5,
                "startDate": "2023-06-01",
                "payments": [],
            }]),
        })
        result = LedgerStore(storage).load()
        loan, rental = result.snapshot.items
        assert isinstance(loan, LoanItem)
        assert loan.payments[0].allocation == Allocation.INTEREST
        assert isinstance(rental, RentalItem)

    def test_save_propagates_storage_error(self, storage, store, user):
        """Test that a failed write is reported to the caller."""
        storage.fail_writes = True
        with pytest.raises(StorageError):
            store.save(LedgerSnapshot(user=user))

    def test_clear(self, storage, store, user):
        """Test that clear removes only this store's slots."""
        storage.write("other_key", "x")
        store.save(LedgerSnapshot(user=user))
        store.clear()
        assert storage.keys() == ["other_key"]


class TestJsonFileStorage:
    """Directory-backed slots."""

    def test_write_read(self, tmp_path):
        """Test a basic write and read."""
        storage = JsonFileStorage(directory=tmp_path / "slots")
        storage.write("finovate_items", "[]")
        assert storage.read("finovate_items") == "[]"
        assert (tmp_path / "slots" / "finovate_items.json").exists()

    def test_missing_key(self, tmp_path):
        """Test that an unknown key reads as None."""
        assert JsonFileStorage(directory=tmp_path).read("nothing") is None

    def test_keys_and_delete(self, tmp_path):
        """Test key listing and deletion."""
        storage = JsonFileStorage(directory=tmp_path)
        storage.write("a", "1")
        storage.write("b", "2")
        assert storage.keys() == ["a", "b"]
        storage.delete("a")
        storage.delete("a")
        assert storage.keys() == ["b"]

    def test_invalid_key(self, tmp_path):
        """Test that path-like keys are rejected."""
        with pytest.raises(StorageError):
            JsonFileStorage(directory=tmp_path).write("../escape", "x")

    def test_default_directory_from_settings(self, tmp_path):
        """Test that the configured data directory is used."""
        storage = JsonFileStorage()
        assert storage.directory == tmp_path / "data"

    def test_non_utf8_slot_is_decode_error(self, tmp_path):
        """Test that undecodable bytes are reported as a corrupt slot."""
        (tmp_path / "finovate_items.json").write_bytes(b'[{"personName": "\xff\xfe"}]')
        with pytest.raises(SlotDecodeError):
            JsonFileStorage(directory=tmp_path).read("finovate_items")

    def test_non_utf8_slot_falls_back_to_empty(self, tmp_path, user):
        """Test that a binary-garbage slot file gives an empty ledger on load."""
        store = LedgerStore(JsonFileStorage(directory=tmp_path))
        store.save(LedgerSnapshot(user=user))
        (tmp_path / "finovate_items.json").write_bytes(b"\xff\xfe")
        result = store.load()
        assert result.has_user is False
        assert result.snapshot == LedgerSnapshot()
        assert result.error

    def test_full_store_on_disk(self, tmp_path, user, loan):
        """Test the ledger store over files."""
        store = LedgerStore(JsonFileStorage(directory=tmp_path))
        store.save(LedgerSnapshot(user=user, items=(loan,)))
        reopened = LedgerStore(JsonFileStorage(directory=tmp_path)).load()
        assert reopened.snapshot.items == (loan,)
        assert reopened.snapshot.user == user
        assert date(2024, 1, 15) == reopened.snapshot.items[0].start_date
