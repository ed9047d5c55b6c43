"""Tests for the audit trail."""

from finovate.audit import AuditLogger
from finovate.models import AuditEventBuilder, AuditEventType, AuditSeverity


class TestAuditEventBuilder:
    """Event construction helpers."""

    def test_unlock_attempt(self):
        """Test success and failure variants."""
        ok = AuditEventBuilder.unlock_attempt("u1", success=True)
        failed = AuditEventBuilder.unlock_attempt("u1", success=False)
        assert ok.event_type == AuditEventType.USER_UNLOCKED
        assert failed.event_type == AuditEventType.UNLOCK_FAILED
        assert failed.severity == AuditSeverity.WARNING

    def test_save_failed_is_error(self):
        """Test that save failures are errors with a message."""
        event = AuditEventBuilder.save_failed("disk full")
        assert event.severity == AuditSeverity.ERROR
        assert event.error_message == "disk full"

    def test_log_dict(self):
        """Test the structured log payload."""
        event = AuditEventBuilder.item_added("i1", "loan", "Carlos")
        data = event.to_log_dict()
        assert data["event_type"] == "item_added"
        assert data["entity_id"] == "i1"
        assert isinstance(data["event_id"], str)


class TestAuditLogger:
    """In-memory history."""

    def test_newest_first(self):
        """Test ordering of recent events."""
        audit = AuditLogger()
        audit.log(AuditEventBuilder.ledger_loaded(0, False))
        audit.log(AuditEventBuilder.ledger_cleared())
        events = audit.recent_events()
        assert [e.event_type for e in events] == [
            AuditEventType.LEDGER_CLEARED,
            AuditEventType.LEDGER_LOADED,
        ]

    def test_history_is_bounded(self):
        """Test that old events are dropped."""
        audit = AuditLogger(history_size=3)
        for count in range(5):
            audit.log(AuditEventBuilder.ledger_loaded(count, False))
        events = audit.recent_events()
        assert len(events) == 3
        assert events[-1].details["item_count"] == 2

    def test_filter_and_limit(self):
        """Test event type filtering and the limit."""
        audit = AuditLogger()
        audit.log(AuditEventBuilder.save_failed("a"))
        audit.log(AuditEventBuilder.ledger_cleared())
        audit.log(AuditEventBuilder.save_failed("b"))
        failures = audit.recent_events(event_type=AuditEventType.SAVE_FAILED)
        assert [e.error_message for e in failures] == ["b", "a"]
        assert len(audit.recent_events(1)) == 1

    def test_log_returns_true(self):
        """Test a normal write."""
        assert AuditLogger().log(AuditEventBuilder.ledger_cleared()) is True

    def test_clear(self):
        """Test emptying the history."""
        audit = AuditLogger()
        audit.log(AuditEventBuilder.ledger_cleared())
        audit.clear()
        assert audit.recent_events() == []
