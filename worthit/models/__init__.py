"""
Data Models Package

This package contains all Pydantic models used in Worth-It Tracker.
All data flowing through the system must conform to these schemas.
"""

from worthit.models.entry import (
    CollectionKind,
    Entry,
    EntryCreate,
    EntryPatch,
    EntryStatistics,
    generate_entry_id,
    materialize_entry,
)
from worthit.models.gesture import (
    DeleteOutcome,
    GestureOutcome,
    GestureResolution,
    GestureState,
    MoveResult,
    PointerKind,
    RowVisual,
    SwipeRow,
)
from worthit.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Entry models
    "CollectionKind",
    "Entry",
    "EntryCreate",
    "EntryPatch",
    "EntryStatistics",
    "generate_entry_id",
    "materialize_entry",
    # Gesture models
    "DeleteOutcome",
    "GestureOutcome",
    "GestureResolution",
    "GestureState",
    "MoveResult",
    "PointerKind",
    "RowVisual",
    "SwipeRow",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
