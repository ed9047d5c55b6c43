"""
Data Models Package

This package contains all Pydantic models used by Finovate.
All data held in the ledger, exported, or rendered must conform to these schemas.
"""

from finovate.models.ledger import (
    Allocation,
    BankAccount,
    DebtItem,
    EventKind,
    FinancialItem,
    InvoiceDetails,
    ItemBase,
    ItemKind,
    LedgerSnapshot,
    LoanItem,
    OtherIncomeItem,
    Payment,
    Reminder,
    RentalItem,
    User,
    new_id,
    parse_item,
    sort_reminders,
)
from finovate.models.drafts import (
    BankAccountDraft,
    ItemDraft,
    PaymentDraft,
    RegistrationDraft,
    ReminderDraft,
)
from finovate.models.validation import ValidationIssue, ValidationResult
from finovate.models.analytics import (
    DashboardStats,
    ItemBalance,
    PortfolioSummary,
    UpcomingEvent,
)
from finovate.models.documents import (
    Document,
    DocumentField,
    DocumentKind,
    DocumentSection,
    DocumentTable,
    OutputMode,
)
from finovate.models.transfer import (
    DataType,
    FullBackupDocument,
    ImportPlan,
    SingleItemDocument,
    TransferDocument,
)
from finovate.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Ledger models
    "Allocation",
    "BankAccount",
    "DebtItem",
    "EventKind",
    "FinancialItem",
    "InvoiceDetails",
    "ItemBase",
    "ItemKind",
    "LedgerSnapshot",
    "LoanItem",
    "OtherIncomeItem",
    "Payment",
    "Reminder",
    "RentalItem",
    "User",
    "new_id",
    "parse_item",
    "sort_reminders",
    # Drafts
    "BankAccountDraft",
    "ItemDraft",
    "PaymentDraft",
    "RegistrationDraft",
    "ReminderDraft",
    # Validation
    "ValidationIssue",
    "ValidationResult",
    # Analytics
    "DashboardStats",
    "ItemBalance",
    "PortfolioSummary",
    "UpcomingEvent",
    # Documents
    "Document",
    "DocumentField",
    "DocumentKind",
    "DocumentSection",
    "DocumentTable",
    "OutputMode",
    # Transfer
    "DataType",
    "FullBackupDocument",
    "ImportPlan",
    "SingleItemDocument",
    "TransferDocument",
    # Audit
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
