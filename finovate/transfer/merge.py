"""
Import / Export Merge Engine

Export serializes the ledger (or one item) into a portable JSON document.
Import is split in three steps so nothing changes before the user agrees:

    parse_transfer_document(text)   -> FullBackupDocument | SingleItemDocument
    plan_import(snapshot, document) -> ImportPlan           (pure, pre-confirmation)
    apply_import(snapshot, plan)    -> LedgerSnapshot       (the commit)

MERGE RULES:
- Full backup: union by identifier per collection. Existing entries always
  win, new ones are appended in document order, reminders are re-sorted by
  date. The imported user is ignored.
- Single item: rejected outright if its id already exists, otherwise
  appended. The check looks at the id only, never at the content.

Re-importing the same full backup is therefore a no-op, and importing two
backups in either order yields the same set of identifiers.
"""

import json
import re
from datetime import date
from typing import Iterable, Optional

import structlog
from pydantic import ValidationError as PydanticValidationError

from finovate.config import get_settings
from finovate.errors import ItemNotFoundError
from finovate.models.ledger import LedgerSnapshot, sort_reminders
from finovate.models.transfer import (
    DataType,
    FullBackupDocument,
    ImportPlan,
    SingleItemDocument,
    TransferDocument,
)
from finovate.models.validation import ValidationResult
from finovate.validation.validator import (
    DuplicateItemError,
    ValidationError,
    pydantic_issues,
)


logger = structlog.get_logger(__name__)


# =============================================================================
# EXPORT
# =============================================================================

def _dump(document) -> str:
    return json.dumps(
        document.model_dump(mode="json", by_alias=True),
        indent=2,
        ensure_ascii=False,
    )


def export_full_backup(snapshot: LedgerSnapshot) -> str:
    document = FullBackupDocument(
        version=get_settings().app.export_version,
        user=snapshot.user,
        items=snapshot.items,
        reminders=snapshot.reminders,
        bank_accounts=snapshot.bank_accounts,
    )
    return _dump(document)


def export_single_item(snapshot: LedgerSnapshot, item_id: str) -> str:
    item = snapshot.find_item(item_id)
    if item is None:
        raise ItemNotFoundError(f"Item not found: {item_id}")
    document = SingleItemDocument(
        version=get_settings().app.export_version,
        item=item,
    )
    return _dump(document)


def backup_filename(today: Optional[date] = None) -> str:
    today = today or date.today()
    return f"finovate-backup-{today.isoformat()}.json"


def item_filename(person_name: str) -> str:
    safe_name = re.sub(r"\s", "_", person_name)
    return f"finovate-item-{safe_name}.json"


# =============================================================================
# IMPORT
# =============================================================================

def parse_transfer_document(text: str) -> TransferDocument:
    """
    Parse and validate an export document.

    Raises:
        ValidationError: Malformed JSON, unknown or missing dataType,
            a single-item document without an item id, or records that
            do not match the schema
    """
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, TypeError) as e:
        raise ValidationError(f"File is not a valid JSON document: {e}") from e

    if not isinstance(data, dict):
        raise ValidationError("Invalid file or unknown format")

    try:
        data_type = DataType(data.get("dataType"))
    except (ValueError, TypeError):
        raise ValidationError("Invalid file or unknown format") from None

    if data_type is DataType.SINGLE_ITEM:
        item = data.get("item")
        if not isinstance(item, dict) or not item.get("id"):
            raise ValidationError("Single-item file does not contain a valid item")
        model = SingleItemDocument
    else:
        # Absent collections count as empty
        for key in ("items", "reminders", "bankAccounts"):
            if data.get(key) is None:
                data[key] = []
        model = FullBackupDocument

    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        result = ValidationResult(subject=data_type.value, issues=pydantic_issues(e))
        raise ValidationError(
            f"File contents are not valid: {e.error_count()} errors", result
        ) from e


def _new_by_id(existing_ids: set, incoming: Iterable) -> tuple[list, list]:
    added, skipped = [], []
    seen = set(existing_ids)
    for record in incoming:
        if record.id in seen:
            skipped.append(record.id)
            continue
        seen.add(record.id)
        added.append(record)
    return added, skipped


def plan_import(snapshot: LedgerSnapshot, document: TransferDocument) -> ImportPlan:
    """
    Work out what an import would add without changing anything.

    Raises:
        DuplicateItemError: A single-item document whose id already exists
    """
    if isinstance(document, SingleItemDocument):
        if snapshot.has_item(document.item.id):
            raise DuplicateItemError(
                f"An item with id {document.item.id} already exists; it cannot be imported"
            )
        return ImportPlan(data_type=DataType.SINGLE_ITEM, new_items=(document.item,))

    items, skipped_items = _new_by_id({i.id for i in snapshot.items}, document.items)
    reminders, skipped_reminders = _new_by_id(
        {r.id for r in snapshot.reminders}, document.reminders
    )
    accounts, skipped_accounts = _new_by_id(
        {a.id for a in snapshot.bank_accounts}, document.bank_accounts
    )

    plan = ImportPlan(
        data_type=DataType.FULL_BACKUP,
        new_items=tuple(items),
        new_reminders=tuple(reminders),
        new_bank_accounts=tuple(accounts),
        skipped_item_ids=tuple(skipped_items),
        skipped_reminder_ids=tuple(skipped_reminders),
        skipped_account_ids=tuple(skipped_accounts),
    )
    logger.info(
        "import_planned",
        data_type=plan.data_type.value,
        new_items=len(plan.new_items),
        skipped_items=len(plan.skipped_item_ids),
    )
    return plan


def apply_import(snapshot: LedgerSnapshot, plan: ImportPlan) -> LedgerSnapshot:
    """
    Commit a plan onto a snapshot.

    Ids are re-checked against the snapshot, so a plan applied twice or
    against a ledger that changed since planning still never duplicates
    an identifier.
    """
    items, _ = _new_by_id({i.id for i in snapshot.items}, plan.new_items)
    update = {"items": snapshot.items + tuple(items)}

    if plan.data_type is DataType.FULL_BACKUP:
        reminders, _ = _new_by_id({r.id for r in snapshot.reminders}, plan.new_reminders)
        accounts, _ = _new_by_id({a.id for a in snapshot.bank_accounts}, plan.new_bank_accounts)
        update["reminders"] = sort_reminders(snapshot.reminders + tuple(reminders))
        update["bank_accounts"] = snapshot.bank_accounts + tuple(accounts)

    return snapshot.model_copy(update=update)
