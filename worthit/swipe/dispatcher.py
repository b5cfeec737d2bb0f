"""
Row Action Dispatcher

Carries out a confirmed delete: exit animation, storage delete, reload.

DESIGN DECISION: The list is ALWAYS re-read from storage after a delete
attempt, whether the delete worked or not. A row must never stay hidden
while its entry still exists in storage; re-rendering from the
authoritative copy brings it back.
"""

import asyncio
from typing import Awaitable, Callable, Optional

import structlog

from worthit.audit import AuditLogger
from worthit.config import SwipeSettings, get_settings
from worthit.models.entry import CollectionKind
from worthit.models.gesture import DeleteOutcome, SwipeRow
from worthit.services.storage.interface import EntryStorageInterface, StorageError
from worthit.swipe.contracts import ListDisplay, Notifier

logger = structlog.get_logger(__name__)

Sleep = Callable[[float], Awaitable[None]]

# Exit animation: slide a full row width to the left
EXIT_OFFSET_PX = 10_000.0


class RowActionDispatcher:
    """
    Executes the visible and persisted consequences of a delete.
    """

    def __init__(
        self,
        storage: EntryStorageInterface,
        display: ListDisplay,
        notifier: Optional[Notifier] = None,
        settings: Optional[SwipeSettings] = None,
        audit_logger: Optional[AuditLogger] = None,
        sleep: Sleep = asyncio.sleep,
    ):
        self._storage = storage
        self._display = display
        self._notifier = notifier
        self._settings = settings or get_settings().swipe
        self._audit_logger = audit_logger
        self._sleep = sleep

    @staticmethod
    def play_exit_animation(row: SwipeRow) -> None:
        """Translate the row off-screen and fade it out."""
        row.visual.exiting = True
        row.visual.swiping = False
        row.visual.offset_px = EXIT_OFFSET_PX
        row.visual.opacity = 0.0

    @staticmethod
    def restore_row(row: SwipeRow) -> None:
        """Undo the exit animation (used when the list can't be reloaded)."""
        row.visual.exiting = False
        row.visual.opacity = 1.0
        row.visual.reset()

    async def on_delete_confirmed(
        self,
        row: Optional[SwipeRow],
        entry_id: str,
        kind: CollectionKind,
    ) -> DeleteOutcome:
        """
        Handle a recognized delete swipe.

        Animates the row away, waits for the animation, deletes the entry
        and re-renders the collection from storage.
        """
        if row is not None:
            self.play_exit_animation(row)

        delay_ms = self._settings.animation_delay_ms
        if delay_ms > 0:
            await self._sleep(delay_ms / 1000.0)

        outcome = await self.delete(kind, entry_id, via="swipe")

        if row is not None and not outcome.reloaded and outcome.error:
            self.restore_row(row)

        return outcome

    async def delete(
        self,
        kind: CollectionKind,
        entry_id: str,
        via: str = "button",
    ) -> DeleteOutcome:
        """Delete an entry and reload its collection."""
        outcome = DeleteOutcome(entry_id=entry_id, kind=kind)

        try:
            outcome.deleted = await self._storage.delete_entry(kind, entry_id)
        except StorageError as e:
            outcome.error = str(e)
            logger.error(
                "delete_failed",
                collection=kind.value,
                entry_id=entry_id,
                error=str(e),
            )
            if self._audit_logger:
                self._audit_logger.log_delete_failed(kind.value, entry_id, str(e))
            self._show_error("Failed to delete entry")
        else:
            if outcome.deleted:
                if self._audit_logger:
                    self._audit_logger.log_entry_deleted(kind.value, entry_id, via)
                self._show_success("Entry deleted successfully")
            else:
                logger.info("delete_target_missing", collection=kind.value, entry_id=entry_id)

        outcome.reloaded = await self.reload(kind)
        return outcome

    async def reload(self, kind: CollectionKind) -> bool:
        """Re-read a collection from storage and render it."""
        try:
            entries = await self._storage.list_entries(kind)
        except StorageError as e:
            logger.error("reload_failed", collection=kind.value, error=str(e))
            self._show_error(f"Failed to load {kind.label.lower()} entries")
            return False

        self._display.render(kind, entries)
        return True

    def _show_error(self, message: str) -> None:
        if self._notifier:
            self._notifier.show_error(message)

    def _show_success(self, message: str) -> None:
        if self._notifier:
            self._notifier.show_success(message)
