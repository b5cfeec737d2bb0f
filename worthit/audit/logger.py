"""
Audit Logger

DESIGN DECISION: Every change to stored entries is logged.
This provides:
1. Traceability of which backend took which write
2. Debugging capability when a remote store is flaky
3. A short activity history the UI can show

The audit logger:
- Never raises (logging must not break a delete or a save)
- Logs through structlog, one JSON line per event
- Keeps the most recent events in memory
"""

import logging
from collections import deque
from typing import Optional

import structlog

from worthit.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


def configure_logging(debug: bool = False, json_output: bool = True) -> None:
    """
    Configure structlog on top of the standard library logger.

    Safe to call more than once; the latest call wins.
    """
    logging.basicConfig(
        format="%(message)s",
        level=logging.DEBUG if debug else logging.INFO,
    )
    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


# Configure structlog for local logging
configure_logging()


class AuditLogger:
    """
    Central audit logging service.

    Logs events to the structured local log and keeps the
    latest `history_size` events for display.
    """

    def __init__(self, history_size: int = 200):
        self._history: deque[AuditEvent] = deque(maxlen=history_size)
        self._logger = structlog.get_logger("worthit.audit")

    def log(self, event: AuditEvent) -> None:
        """Log an audit event. Never raises."""
        try:
            log_dict = event.to_log_dict()

            if event.severity is AuditSeverity.ERROR:
                self._logger.error("audit_event", **log_dict)
            elif event.severity is AuditSeverity.WARNING:
                self._logger.warning("audit_event", **log_dict)
            elif event.severity is AuditSeverity.DEBUG:
                self._logger.debug("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except Exception as e:
            # Log failure but don't raise
            logging.getLogger(__name__).warning("Audit logging failed: %s", e)

        self._history.append(event)

    def recent(self, limit: int = 50) -> list[AuditEvent]:
        """Most recent events, newest first."""
        events = list(self._history)[-limit:] if limit > 0 else []
        return list(reversed(events))

    def log_entry_added(self, collection: str, entry_id: str, description: str) -> None:
        self.log(AuditEventBuilder.entry_added(collection, entry_id, description))

    def log_entry_updated(self, collection: str, entry_id: str, changes: dict) -> None:
        self.log(AuditEventBuilder.entry_updated(collection, entry_id, changes))

    def log_entry_deleted(self, collection: str, entry_id: str, via: str) -> None:
        self.log(AuditEventBuilder.entry_deleted(collection, entry_id, via))

    def log_delete_failed(self, collection: str, entry_id: str, error: str) -> None:
        self.log(AuditEventBuilder.delete_failed(collection, entry_id, error))

    def log_save_failed(self, collection: str, error: str) -> None:
        self.log(AuditEventBuilder.save_failed(collection, error))

    def log_swipe_delete(
        self,
        collection: str,
        entry_id: str,
        distance: float,
        elapsed_ms: float,
    ) -> None:
        self.log(
            AuditEventBuilder.swipe_delete_confirmed(
                collection, entry_id, distance, elapsed_ms
            )
        )

    def log_storage_fallback(self, backend: str, operation: str, error: str) -> None:
        self.log(AuditEventBuilder.storage_fallback(backend, operation, error))

    def log_sync_completed(self, source: str, target: str, results: dict) -> None:
        self.log(AuditEventBuilder.sync_completed(source, target, results))

    def log_render_target_missing(self, collection: str) -> None:
        self.log(AuditEventBuilder.render_target_missing(collection))

    def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
    ) -> None:
        self.log(AuditEventBuilder.system_error(error_type, error_message, details))
