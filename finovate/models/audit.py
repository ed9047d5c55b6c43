"""
Audit Models for Finovate

Every mutation of the ledger, every import/export and every document
produced is recorded as an audit event. This provides:
1. Traceability of what changed the ledger and when
2. Debugging information when a save or import goes wrong
3. A visible trail of degraded features (e.g. missing payment codes)

DESIGN DECISION: Audit events are append-only. We never modify them.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Account
    USER_REGISTERED = "user_registered"
    USER_UNLOCKED = "user_unlocked"
    UNLOCK_FAILED = "unlock_failed"
    PASSWORD_RESET = "password_reset"
    PROFILE_UPDATED = "profile_updated"
    LEDGER_CLEARED = "ledger_cleared"

    # Items and payments
    ITEM_ADDED = "item_added"
    ITEM_DELETED = "item_deleted"
    PAYMENT_ADDED = "payment_added"
    RECEIPT_MARKED = "receipt_marked"

    # Reminders and accounts
    REMINDER_ADDED = "reminder_added"
    REMINDER_TOGGLED = "reminder_toggled"
    REMINDER_DELETED = "reminder_deleted"
    ACCOUNT_ADDED = "account_added"
    ACCOUNT_DELETED = "account_deleted"

    # Validation
    VALIDATION_FAILED = "validation_failed"

    # Persistence
    LEDGER_LOADED = "ledger_loaded"
    LOAD_FAILED = "load_failed"
    SAVE_FAILED = "save_failed"

    # Import / export
    DATA_EXPORTED = "data_exported"
    IMPORT_PLANNED = "import_planned"
    IMPORT_COMMITTED = "import_committed"
    IMPORT_DECLINED = "import_declined"
    IMPORT_REJECTED = "import_rejected"

    # Documents
    DOCUMENT_GENERATED = "document_generated"
    PAYMENT_CODE_FAILED = "payment_code_failed"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.now,
        description="When the event occurred (local time)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'item', 'payment', 'reminder')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Event details
    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )

    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.item_added(item_id, "loan", "Ana")
        event = AuditEventBuilder.save_failed("disk full")
    """

    @staticmethod
    def user_registered(user_id: str, name: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.USER_REGISTERED,
            entity_type="user",
            entity_id=user_id,
            description=f"User registered: {name}",
            is_user_action=True,
        )

    @staticmethod
    def unlock_attempt(user_id: Optional[str], success: bool, method: str = "password") -> AuditEvent:
        return AuditEvent(
            event_type=(
                AuditEventType.USER_UNLOCKED if success else AuditEventType.UNLOCK_FAILED
            ),
            severity=AuditSeverity.INFO if success else AuditSeverity.WARNING,
            entity_type="user",
            entity_id=user_id,
            description=f"{method.capitalize()} check {'passed' if success else 'failed'}",
            details={"method": method},
            is_user_action=True,
        )

    @staticmethod
    def user_changed(event_type: AuditEventType, user_id: str, fields: list[str]) -> AuditEvent:
        return AuditEvent(
            event_type=event_type,
            entity_type="user",
            entity_id=user_id,
            description=f"User {event_type.value.replace('_', ' ')}",
            details={"fields": fields},
            is_user_action=True,
        )

    @staticmethod
    def ledger_cleared() -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LEDGER_CLEARED,
            severity=AuditSeverity.WARNING,
            description="All ledger data cleared",
            is_user_action=True,
        )

    @staticmethod
    def item_added(item_id: str, kind: str, person_name: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ITEM_ADDED,
            entity_type="item",
            entity_id=item_id,
            description=f"Item added: {kind} for {person_name}",
            details={"kind": kind, "person_name": person_name},
            is_user_action=True,
        )

    @staticmethod
    def item_deleted(item_id: str, payment_count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ITEM_DELETED,
            entity_type="item",
            entity_id=item_id,
            description=f"Item deleted with {payment_count} payments",
            details={"payment_count": payment_count},
            is_user_action=True,
        )

    @staticmethod
    def payment_added(item_id: str, payment_id: str, amount: str, allocation: Optional[str]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PAYMENT_ADDED,
            entity_type="payment",
            entity_id=payment_id,
            description=f"Payment of {amount} added",
            details={"item_id": item_id, "amount": amount, "allocation": allocation},
            is_user_action=True,
        )

    @staticmethod
    def record_changed(
        event_type: AuditEventType,
        entity_type: str,
        entity_id: str,
        details: Optional[dict] = None,
    ) -> AuditEvent:
        """Reminder / account / receipt-flag changes share one shape."""
        return AuditEvent(
            event_type=event_type,
            entity_type=entity_type,
            entity_id=entity_id,
            description=f"{entity_type.capitalize()} {event_type.value.split('_')[-1]}",
            details=details or {},
            is_user_action=True,
        )

    @staticmethod
    def validation_failed(subject: str, issues: list[dict]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type=subject,
            description=f"{subject.capitalize()} validation failed with {len(issues)} issues",
            details={"issues": issues},
        )

    @staticmethod
    def ledger_loaded(item_count: int, has_user: bool) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LEDGER_LOADED,
            description=f"Ledger loaded with {item_count} items",
            details={"item_count": item_count, "has_user": has_user},
        )

    @staticmethod
    def load_failed(error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOAD_FAILED,
            severity=AuditSeverity.WARNING,
            description="Stored ledger could not be read; starting empty",
            error_message=error_message,
        )

    @staticmethod
    def save_failed(error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            description="Ledger could not be saved; changes kept in memory",
            error_message=error_message,
        )

    @staticmethod
    def data_exported(data_type: str, filename: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DATA_EXPORTED,
            description=f"Exported {data_type} as {filename}",
            details={"data_type": data_type, "filename": filename},
            is_user_action=True,
        )

    @staticmethod
    def import_event(
        event_type: AuditEventType,
        data_type: Optional[str],
        details: Optional[dict] = None,
        error_message: Optional[str] = None,
    ) -> AuditEvent:
        severity = (
            AuditSeverity.WARNING
            if event_type == AuditEventType.IMPORT_REJECTED
            else AuditSeverity.INFO
        )
        return AuditEvent(
            event_type=event_type,
            severity=severity,
            description=f"Import {event_type.value.split('_')[-1]}: {data_type or 'unknown'}",
            details=details or {},
            error_message=error_message,
            is_user_action=event_type != AuditEventType.IMPORT_PLANNED,
        )

    @staticmethod
    def document_generated(kind: str, filename: str, output: str, item_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DOCUMENT_GENERATED,
            entity_type="item",
            entity_id=item_id,
            description=f"{kind.replace('_', ' ').capitalize()} generated ({output})",
            details={"kind": kind, "filename": filename, "output": output},
            is_user_action=True,
        )

    @staticmethod
    def payment_code_failed(item_id: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PAYMENT_CODE_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="item",
            entity_id=item_id,
            description="Payment code unavailable; invoice generated without it",
            error_message=error_message,
        )
