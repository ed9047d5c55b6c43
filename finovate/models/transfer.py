"""
Import / Export document models.

Two portable JSON layouts, both tagged with ``dataType`` and ``version``:

    {"dataType": "full-backup", "version": "1.0",
     "user": {...}, "items": [...], "reminders": [...], "bankAccounts": [...]}

    {"dataType": "single-item", "version": "1.0", "item": {...}}
"""

from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from finovate.models.ledger import (
    BankAccount,
    FinancialItem,
    ItemBase,
    Reminder,
    User,
)


class DataType(str, Enum):
    """Export document discriminator."""
    FULL_BACKUP = "full-backup"
    SINGLE_ITEM = "single-item"

    @classmethod
    def _missing_(cls, value: object) -> Optional["DataType"]:
        # Files written by the first release carry a product prefix
        if isinstance(value, str) and value.startswith("finovate-"):
            return cls._value2member_map_.get(value[len("finovate-"):])
        return None


class TransferModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class FullBackupDocument(TransferModel):
    data_type: DataType = DataType.FULL_BACKUP
    version: str = "1.0"
    user: Optional[User] = None
    items: tuple[FinancialItem, ...] = ()
    reminders: tuple[Reminder, ...] = ()
    bank_accounts: tuple[BankAccount, ...] = ()


class SingleItemDocument(TransferModel):
    data_type: DataType = DataType.SINGLE_ITEM
    version: str = "1.0"
    item: FinancialItem


TransferDocument = Union[FullBackupDocument, SingleItemDocument]


class ImportPlan(BaseModel):
    """
    What an import would add, computed before the user confirms.

    Applying the plan is the commit step; building it changes nothing.
    """
    model_config = ConfigDict(frozen=True)

    data_type: DataType
    new_items: tuple[FinancialItem, ...] = ()
    new_reminders: tuple[Reminder, ...] = ()
    new_bank_accounts: tuple[BankAccount, ...] = ()
    skipped_item_ids: tuple[str, ...] = Field(
        default=(),
        description="Incoming ids already present locally (full backup only)"
    )
    skipped_reminder_ids: tuple[str, ...] = ()
    skipped_account_ids: tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not (self.new_items or self.new_reminders or self.new_bank_accounts)

    def describe(self) -> str:
        """One-line summary for the confirmation prompt."""
        if self.data_type is DataType.SINGLE_ITEM and self.new_items:
            item: ItemBase = self.new_items[0]
            return f'Importar el registro "{item.description}" para "{item.person_name}".'
        return (
            f"Se agregarán {len(self.new_items)} registros, "
            f"{len(self.new_reminders)} recordatorios y "
            f"{len(self.new_bank_accounts)} cuentas. "
            "Los registros existentes no se modificarán."
        )
