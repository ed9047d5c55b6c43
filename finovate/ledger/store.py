"""
Ledger Store

Persists a LedgerSnapshot as four independent text slots:

    <prefix>user       the User object (written only when one exists)
    <prefix>items      list of financial items
    <prefix>reminders  list of reminders
    <prefix>accounts   list of bank accounts

Slots carry no version field; older layouts are absorbed by the models'
tolerant parsing (legacy enum values, missing amounts as zero).

DESIGN DECISION: Loading never fails. A missing, unreadable or corrupt slot
means the whole ledger starts empty and the user is asked to register again.
Saving, on the other hand, reports failure to the caller.
"""

import json
from typing import Optional

import structlog
from pydantic import BaseModel, ConfigDict, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from finovate.config import get_settings
from finovate.models.ledger import (
    BankAccount,
    FinancialItem,
    LedgerSnapshot,
    Reminder,
    User,
)
from finovate.services.storage.interface import (
    LedgerStorageInterface,
    SlotDecodeError,
    StorageError,
)


logger = structlog.get_logger(__name__)

USER_SLOT = "user"
ITEMS_SLOT = "items"
REMINDERS_SLOT = "reminders"
ACCOUNTS_SLOT = "accounts"
SLOTS = (USER_SLOT, ITEMS_SLOT, REMINDERS_SLOT, ACCOUNTS_SLOT)

_ITEMS = TypeAdapter(tuple[FinancialItem, ...])
_REMINDERS = TypeAdapter(tuple[Reminder, ...])
_ACCOUNTS = TypeAdapter(tuple[BankAccount, ...])


class LoadResult(BaseModel):
    """Outcome of reading the persisted ledger."""
    model_config = ConfigDict(frozen=True)

    snapshot: LedgerSnapshot
    has_user: bool
    error: Optional[str] = None


class LedgerStore:
    """Reads and writes the four ledger slots through a storage backend."""

    def __init__(
        self,
        storage: LedgerStorageInterface,
        key_prefix: Optional[str] = None,
    ):
        self._storage = storage
        if key_prefix is None:
            key_prefix = get_settings().storage.key_prefix
        self._prefix = key_prefix

    def key(self, slot: str) -> str:
        return f"{self._prefix}{slot}"

    def _read_json(self, slot: str):
        raw = self._storage.read(self.key(slot))
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise SlotDecodeError(f"Slot {self.key(slot)} is not valid JSON: {e}") from e

    def _decode(self) -> LedgerSnapshot:
        user_data = self._read_json(USER_SLOT)
        items_data = self._read_json(ITEMS_SLOT)
        reminders_data = self._read_json(REMINDERS_SLOT)
        accounts_data = self._read_json(ACCOUNTS_SLOT)

        try:
            return LedgerSnapshot(
                user=User.model_validate(user_data) if user_data else None,
                items=_ITEMS.validate_python(items_data or []),
                reminders=_REMINDERS.validate_python(reminders_data or []),
                bank_accounts=_ACCOUNTS.validate_python(accounts_data or []),
            )
        except PydanticValidationError as e:
            raise SlotDecodeError(
                f"Stored ledger does not match the expected layout: {e.error_count()} errors"
            ) from e

    def load(self) -> LoadResult:
        """
        Read all slots.

        Any failure yields an empty snapshot with ``has_user=False``;
        the reason is logged and returned in ``error``.
        """
        try:
            snapshot = self._decode()
        except StorageError as e:
            logger.warning("ledger_load_failed", error=str(e))
            return LoadResult(snapshot=LedgerSnapshot(), has_user=False, error=str(e))

        logger.info(
            "ledger_loaded",
            items=len(snapshot.items),
            reminders=len(snapshot.reminders),
            accounts=len(snapshot.bank_accounts),
        )
        return LoadResult(snapshot=snapshot, has_user=snapshot.user is not None)

    def save(self, snapshot: LedgerSnapshot) -> None:
        """
        Write every slot.

        Slots are written in order with no rollback; a failure part-way
        leaves the earlier slots updated.

        Raises:
            StorageError: If any slot cannot be written
        """
        if snapshot.user is not None:
            self._write(USER_SLOT, snapshot.user.to_document())
        self._write(ITEMS_SLOT, [item.to_document() for item in snapshot.items])
        self._write(REMINDERS_SLOT, [r.to_document() for r in snapshot.reminders])
        self._write(ACCOUNTS_SLOT, [a.to_document() for a in snapshot.bank_accounts])

    def _write(self, slot: str, data) -> None:
        self._storage.write(self.key(slot), json.dumps(data, ensure_ascii=False))

    def clear(self) -> None:
        """Remove every slot under this store's prefix."""
        self._storage.clear(self._prefix)
        logger.info("ledger_storage_cleared", prefix=self._prefix)
