"""Backup export and merge-by-identifier import."""

from finovate.transfer.merge import (
    apply_import,
    backup_filename,
    export_full_backup,
    export_single_item,
    item_filename,
    parse_transfer_document,
    plan_import,
)

__all__ = [
    "apply_import",
    "backup_filename",
    "export_full_backup",
    "export_single_item",
    "item_filename",
    "parse_transfer_document",
    "plan_import",
]
