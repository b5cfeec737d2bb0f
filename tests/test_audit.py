"""
Tests for the audit logger.
"""

import pytest

from worthit.audit import AuditLogger
from worthit.models.audit import AuditEventType, AuditSeverity


class TestAuditLogger:
    """Tests for in-memory history and helper methods."""

    def test_recent_is_newest_first(self):
        """Test recent() returns the latest events first."""
        audit = AuditLogger()
        audit.log_entry_added("finance", "a", "Coffee")
        audit.log_entry_deleted("finance", "a", via="swipe")

        events = audit.recent()
        assert [e.event_type for e in events] == [
            AuditEventType.ENTRY_DELETED,
            AuditEventType.ENTRY_ADDED,
        ]

    def test_history_is_bounded(self):
        """Test only the newest history_size events are kept."""
        audit = AuditLogger(history_size=3)
        for i in range(5):
            audit.log_entry_added("media", str(i), f"Film {i}")
        assert [e.entry_id for e in audit.recent()] == ["4", "3", "2"]

    def test_recent_limit(self):
        """Test the limit argument."""
        audit = AuditLogger()
        for i in range(5):
            audit.log_render_target_missing("media")
        assert len(audit.recent(limit=2)) == 2
        assert audit.recent(limit=0) == []

    def test_error_helpers_set_severity(self):
        """Test failure events are logged as errors."""
        audit = AuditLogger()
        audit.log_delete_failed("finance", "a", "timeout")
        audit.log_error("ValueError", "bad input")

        for event in audit.recent():
            assert event.severity is AuditSeverity.ERROR

    def test_swipe_event_details(self):
        """Test swipe deletes record distance and duration."""
        audit = AuditLogger()
        audit.log_swipe_delete("media", "m1", 110.0, 350.0)
        event = audit.recent()[0]
        assert event.details == {"distance_px": 110.0, "elapsed_ms": 350.0}


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
