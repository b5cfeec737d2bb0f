"""
Rendered rows.

RenderedList is the in-memory list of rows the UI draws from. Each
render rebuilds the rows of a collection and re-binds the gesture
recognizer to them.
"""

from typing import Optional

import structlog

from worthit.audit import AuditLogger
from worthit.models.entry import CollectionKind, Entry
from worthit.models.gesture import SwipeRow
from worthit.swipe.recognizer import GestureRecognizer

logger = structlog.get_logger(__name__)


def row_id_for(kind: CollectionKind, entry_id: str) -> str:
    return f"{kind.value}-{entry_id}"


class RenderedList:
    """
    List display holding the rows of every mounted collection.
    """

    def __init__(
        self,
        recognizer: Optional[GestureRecognizer] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._recognizer = recognizer
        self._audit_logger = audit_logger
        self._entries: dict[CollectionKind, list[Entry]] = {}
        self._rows: dict[CollectionKind, list[SwipeRow]] = {}
        self.render_count: dict[CollectionKind, int] = {}

    def attach_recognizer(self, recognizer: GestureRecognizer) -> None:
        self._recognizer = recognizer
        for kind, rows in self._rows.items():
            recognizer.bind_rows(kind, rows)

    def mount(self, kind: CollectionKind) -> None:
        """Register a render target for a collection."""
        self._entries.setdefault(kind, [])
        self._rows.setdefault(kind, [])
        self.render_count.setdefault(kind, 0)

    def unmount(self, kind: CollectionKind) -> None:
        self._entries.pop(kind, None)
        self._rows.pop(kind, None)
        if self._recognizer:
            self._recognizer.unbind(kind)

    def is_mounted(self, kind: CollectionKind) -> bool:
        return kind in self._rows

    def render(self, kind: CollectionKind, entries: list[Entry]) -> bool:
        """
        Rebuild the rows of `kind`, newest first.

        Returns False (and logs) when no target is mounted for `kind`.
        """
        if not self.is_mounted(kind):
            logger.warning("render_target_missing", collection=kind.value)
            if self._audit_logger:
                self._audit_logger.log_render_target_missing(kind.value)
            return False

        ordered = sorted(entries, key=lambda e: e.timestamp, reverse=True)
        rows = [
            SwipeRow(row_id=row_id_for(kind, entry.id), entry_id=entry.id, kind=kind)
            for entry in ordered
        ]
        self._entries[kind] = ordered
        self._rows[kind] = rows
        self.render_count[kind] = self.render_count.get(kind, 0) + 1

        # Bindings do not survive a render
        if self._recognizer:
            self._recognizer.bind_rows(kind, rows)
        return True

    def entries(self, kind: CollectionKind) -> list[Entry]:
        return list(self._entries.get(kind, []))

    def rows(self, kind: CollectionKind) -> list[SwipeRow]:
        return list(self._rows.get(kind, []))

    def row_for_entry(self, kind: CollectionKind, entry_id: str) -> Optional[SwipeRow]:
        for row in self._rows.get(kind, []):
            if row.entry_id == entry_id:
                return row
        return None

    def entry_for_row(self, row: SwipeRow) -> Optional[Entry]:
        for entry in self._entries.get(row.kind, []):
            if entry.id == row.entry_id:
                return entry
        return None
