"""
Audit Models for Worth-It Tracker

Every change to stored entries, and every time a backend had to be
skipped, is recorded as an audit event. This provides:
1. A readable activity history in the UI
2. Debugging information when a remote backend misbehaves
3. A trail of which backend actually took each write

DESIGN DECISION: Audit events are append-only. We never modify them.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Entry lifecycle
    ENTRY_ADDED = "entry_added"
    ENTRY_UPDATED = "entry_updated"
    ENTRY_DELETED = "entry_deleted"
    DELETE_FAILED = "delete_failed"
    SAVE_FAILED = "save_failed"

    # Gestures
    SWIPE_DELETE_CONFIRMED = "swipe_delete_confirmed"

    # Storage
    STORAGE_FALLBACK = "storage_fallback"
    SYNC_COMPLETED = "sync_completed"

    # UI / system
    RENDER_TARGET_MISSING = "render_target_missing"
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AuditEvent(BaseModel):
    """
    A single audit event.
    """

    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )

    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    # Context - which entry/collection is this about?
    collection: Optional[str] = Field(
        default=None,
        description="Collection kind ('finance' or 'media')"
    )
    entry_id: Optional[str] = None
    backend: Optional[str] = Field(
        default=None,
        description="Storage backend involved, if any"
    )

    description: str = Field(..., max_length=500)
    details: dict[str, Any] = Field(default_factory=dict)
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
            "collection": self.collection,
            "entry_id": self.entry_id,
            "backend": self.backend,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.entry_added("finance", entry_id, "Coffee")
        event = AuditEventBuilder.storage_fallback("github", "add_entry", "timeout")
    """

    @staticmethod
    def entry_added(collection: str, entry_id: str, description: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ENTRY_ADDED,
            collection=collection,
            entry_id=entry_id,
            description=f"Entry added: {description}",
            is_user_action=True,
        )

    @staticmethod
    def entry_updated(collection: str, entry_id: str, changes: dict) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ENTRY_UPDATED,
            collection=collection,
            entry_id=entry_id,
            description=f"Entry updated: {', '.join(sorted(changes)) or 'no changes'}",
            details={k: str(v) for k, v in changes.items()},
            is_user_action=True,
        )

    @staticmethod
    def entry_deleted(collection: str, entry_id: str, via: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ENTRY_DELETED,
            collection=collection,
            entry_id=entry_id,
            description=f"Entry deleted via {via}",
            details={"via": via},
            is_user_action=True,
        )

    @staticmethod
    def delete_failed(collection: str, entry_id: str, error: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DELETE_FAILED,
            severity=AuditSeverity.ERROR,
            collection=collection,
            entry_id=entry_id,
            description="Entry could not be deleted",
            error_message=error,
        )

    @staticmethod
    def save_failed(collection: str, error: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            collection=collection,
            description="Entry could not be saved",
            error_message=error,
        )

    @staticmethod
    def swipe_delete_confirmed(
        collection: str,
        entry_id: str,
        distance: float,
        elapsed_ms: float,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SWIPE_DELETE_CONFIRMED,
            collection=collection,
            entry_id=entry_id,
            description="Swipe-to-delete confirmed",
            details={"distance_px": distance, "elapsed_ms": elapsed_ms},
            is_user_action=True,
        )

    @staticmethod
    def storage_fallback(backend: str, operation: str, error: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_FALLBACK,
            severity=AuditSeverity.WARNING,
            backend=backend,
            description=f"{backend} failed during {operation}, trying next backend",
            details={"operation": operation},
            error_message=error,
        )

    @staticmethod
    def sync_completed(source: str, target: str, results: dict) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYNC_COMPLETED,
            backend=target,
            description=f"Synced {source} into {target}",
            details=results,
            is_user_action=True,
        )

    @staticmethod
    def render_target_missing(collection: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RENDER_TARGET_MISSING,
            severity=AuditSeverity.WARNING,
            collection=collection,
            description=f"No render target mounted for {collection}",
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            details=details or {},
            error_message=error_message,
        )
