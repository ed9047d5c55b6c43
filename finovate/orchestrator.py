"""
Main Orchestrator for Finovate

This module ties together the ledger, the document services and the
transfer engine, and defines the end-to-end flows for:
1. Documents (record → build → payment code → render → deliver)
2. Transfer (export → file text; file text → parse → plan → confirm → commit)

DESIGN DECISION: The orchestrator enforces the boundaries:
- No import changes the ledger without an explicit confirmation
- A failing payment code never fails an invoice
- Every step is audited
"""

from datetime import date
from pathlib import Path
from typing import Callable, Optional, Union

from finovate.audit import AuditLogger
from finovate.config import get_settings
from finovate.errors import ItemNotFoundError
from finovate.ledger import Ledger, LedgerStore
from finovate.models.audit import AuditEventBuilder, AuditEventType
from finovate.models.documents import Document, OutputMode
from finovate.models.ledger import InvoiceDetails, LedgerSnapshot
from finovate.models.transfer import DataType, ImportPlan
from finovate.services.documents import (
    DocumentOutputError,
    PdfRenderer,
    build_invoice,
    build_loan_statement,
    build_receipt,
    default_invoice_details,
)
from finovate.services.payment_code import (
    DegradedFeatureError,
    PaymentCodeGenerator,
    QrPaymentCodeGenerator,
    build_payment_code_text,
)
from finovate.services.storage import (
    InMemoryStorage,
    JsonFileStorage,
    LedgerStorageInterface,
)
from finovate.transfer import (
    backup_filename,
    export_full_backup,
    export_single_item,
    item_filename,
    parse_transfer_document,
    plan_import,
)
from finovate.validation import ValidationError


DocumentOutput = Union[Path, str]


class DocumentFlow:
    """
    Orchestrates receipt, statement and invoice generation.

    Flow:
    1. Look up the user, item (and payment)
    2. Build the structured document
    3. Invoice only: try to produce the payment code
    4. Render to PDF and deliver as a file or a preview URI
    5. Receipt only: flag the payment as having a receipt
    """

    def __init__(
        self,
        ledger: Ledger,
        renderer: Optional[PdfRenderer] = None,
        payment_code_generator: Optional[PaymentCodeGenerator] = None,
    ):
        self._ledger = ledger
        self._renderer = renderer or PdfRenderer()
        self._payment_codes = payment_code_generator or QrPaymentCodeGenerator()

    def _deliver(
        self,
        document: Document,
        item_id: str,
        mode: OutputMode,
        directory: Optional[Path],
    ) -> DocumentOutput:
        output = self._renderer.emit(document, mode, directory)
        self._ledger.audit.log(AuditEventBuilder.document_generated(
            kind=document.kind.value,
            filename=document.filename,
            output=mode.value,
            item_id=item_id,
        ))
        return output

    def receipt(
        self,
        item_id: str,
        payment_id: str,
        mode: OutputMode = OutputMode.DOWNLOAD,
        directory: Optional[Path] = None,
        today: Optional[date] = None,
    ) -> DocumentOutput:
        user = self._ledger.require_user()
        item = self._ledger.require_item(item_id)
        payment = item.find_payment(payment_id)
        if payment is None:
            raise ItemNotFoundError(f"Payment not found: {payment_id}")

        output = self._deliver(build_receipt(user, item, payment, today), item_id, mode, directory)
        self._ledger.mark_receipt_generated(item_id, payment_id)
        return output

    def statement(
        self,
        item_id: str,
        mode: OutputMode = OutputMode.DOWNLOAD,
        directory: Optional[Path] = None,
    ) -> DocumentOutput:
        """Loans only; any other kind raises ValidationError."""
        user = self._ledger.require_user()
        item = self._ledger.require_item(item_id)
        return self._deliver(build_loan_statement(user, item), item_id, mode, directory)

    def invoice_defaults(self, item_id: str, today: Optional[date] = None) -> InvoiceDetails:
        return default_invoice_details(self._ledger.require_item(item_id), today)

    def payment_code_for(self, item_id: str, details: InvoiceDetails) -> Optional[bytes]:
        """
        PNG payment code for an invoice, or None if it cannot be produced.

        The failure is audited; it is never raised.
        """
        user = self._ledger.require_user()
        text = build_payment_code_text(user, details, self._ledger.snapshot.bank_accounts)
        try:
            return self._payment_codes.generate(text)
        except DegradedFeatureError as e:
            self._ledger.audit.log(AuditEventBuilder.payment_code_failed(item_id, str(e)))
            return None

    def build_invoice_document(
        self,
        item_id: str,
        details: Optional[InvoiceDetails] = None,
        today: Optional[date] = None,
    ) -> Document:
        user = self._ledger.require_user()
        item = self._ledger.require_item(item_id)
        details = details or default_invoice_details(item, today)
        return build_invoice(
            user,
            item,
            details,
            self._ledger.snapshot.bank_accounts,
            payment_code=self.payment_code_for(item_id, details),
            today=today,
        )

    def invoice(
        self,
        item_id: str,
        details: Optional[InvoiceDetails] = None,
        mode: OutputMode = OutputMode.DOWNLOAD,
        directory: Optional[Path] = None,
        today: Optional[date] = None,
    ) -> DocumentOutput:
        document = self.build_invoice_document(item_id, details, today)
        return self._deliver(document, item_id, mode, directory)


class TransferFlow:
    """
    Orchestrates export and import.

    Import flow:
    1. Parse → reject malformed or unknown documents
    2. Plan → compute what would be added (single-item duplicates rejected here)
    3. Confirm → caller decides (PAUSE - nothing has changed yet)
    4. Commit → merge into the ledger and save

    Declining at step 3 leaves the ledger untouched.
    """

    def __init__(self, ledger: Ledger):
        self._ledger = ledger

    def export_all(self, today: Optional[date] = None) -> tuple[str, str]:
        """Returns (suggested filename, JSON text)."""
        filename = backup_filename(today)
        text = export_full_backup(self._ledger.snapshot)
        self._ledger.audit.log(AuditEventBuilder.data_exported(
            DataType.FULL_BACKUP.value, filename
        ))
        return filename, text

    def export_item(self, item_id: str) -> tuple[str, str]:
        item = self._ledger.require_item(item_id)
        filename = item_filename(item.person_name)
        text = export_single_item(self._ledger.snapshot, item_id)
        self._ledger.audit.log(AuditEventBuilder.data_exported(
            DataType.SINGLE_ITEM.value, filename
        ))
        return filename, text

    def write_export(self, filename: str, text: str, directory: Optional[Path] = None) -> Path:
        """
        Save export text as a file.

        Raises:
            DocumentOutputError: If the file cannot be written
        """
        directory = Path(directory) if directory is not None else get_settings().documents.output_dir
        path = directory / filename
        try:
            directory.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding="utf-8")
        except OSError as e:
            raise DocumentOutputError(f"Cannot write {path}: {e}") from e
        return path

    def preview_import(self, text: str) -> ImportPlan:
        """
        Parse and plan an import without changing anything.

        Raises:
            ValidationError: Invalid document, or a duplicate single item
        """
        try:
            document = parse_transfer_document(text)
            plan = plan_import(self._ledger.snapshot, document)
        except ValidationError as e:
            self._ledger.audit.log(AuditEventBuilder.import_event(
                AuditEventType.IMPORT_REJECTED,
                None,
                error_message=str(e),
            ))
            raise

        self._ledger.audit.log(AuditEventBuilder.import_event(
            AuditEventType.IMPORT_PLANNED,
            plan.data_type.value,
            {"new_items": len(plan.new_items), "skipped_items": len(plan.skipped_item_ids)},
        ))
        return plan

    def import_document(
        self,
        text: str,
        confirm: Callable[[ImportPlan], bool],
    ) -> Optional[LedgerSnapshot]:
        """
        Full import with a confirmation gate.

        Returns the new snapshot, or None when the caller declined.
        """
        plan = self.preview_import(text)
        if not confirm(plan):
            self._ledger.audit.log(AuditEventBuilder.import_event(
                AuditEventType.IMPORT_DECLINED, plan.data_type.value
            ))
            return None
        return self._ledger.commit_import(plan)


def create_app_components(
    use_storage: bool = True,
    data_dir: Optional[Path] = None,
) -> tuple[Ledger, DocumentFlow, TransferFlow]:
    """
    Factory function to create all application components.

    Args:
        use_storage: Whether to persist to the JSON-file data directory.
                    Set to False for an in-memory session.
        data_dir: Overrides the configured data directory.

    Returns:
        (ledger, document_flow, transfer_flow)
    """
    storage: LedgerStorageInterface
    if use_storage:
        storage = JsonFileStorage(directory=data_dir)
    else:
        storage = InMemoryStorage()

    audit_logger = AuditLogger(get_settings().app.audit_history_size)
    ledger = Ledger.open(LedgerStore(storage), audit_logger=audit_logger)

    return ledger, DocumentFlow(ledger), TransferFlow(ledger)
