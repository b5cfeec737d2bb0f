"""
Main Orchestrator for Worth-It Tracker

This module ties together all the components and defines the
end-to-end flows for:
1. Adding an entry (form → validate → store → reload)
2. Toggling the worth-it flag (patch → store → reload)
3. Deleting an entry (button or swipe → store → reload)
4. Statistics, CSV export and local → remote sync

DESIGN DECISION: Every flow that changes storage ends by re-reading
the collection from storage and rendering it. The list on screen is
always the authoritative copy, never a locally patched one.
"""

import csv
import io
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Optional, Union

import structlog
from pydantic import ValidationError

from worthit.audit import AuditLogger, configure_logging
from worthit.config import Settings, get_settings
from worthit.models.entry import (
    CollectionKind,
    Entry,
    EntryCreate,
    EntryPatch,
    EntryStatistics,
)
from worthit.services.storage import (
    EntryStorageInterface,
    FallbackStorage,
    LocalJsonStorage,
    StorageError,
    SyncReport,
    create_storage,
    sync_collections,
)
from worthit.swipe import (
    GestureRecognizer,
    ListDisplay,
    Notifier,
    RenderedList,
    RowActionDispatcher,
    SwipeController,
)
from worthit.ui.feedback import MessageBoard
from worthit.ui.formatting import format_currency, format_date

logger = structlog.get_logger(__name__)

EMPTY_EXPORT = "No data to export"

MISSING_DESCRIPTION = {
    CollectionKind.FINANCE: "Please enter a description",
    CollectionKind.MEDIA: "Please enter what you watched",
}
INVALID_AMOUNT = "Please enter a valid amount greater than 0"
ADDED_MESSAGE = {
    CollectionKind.FINANCE: "Transaction added successfully!",
    CollectionKind.MEDIA: "Media entry added successfully!",
}


class EntryLogFlow:
    """
    Orchestrates every user action on the finance and media logs.

    Flow for a new entry:
    1. Validate → description present, finance amount > 0
    2. Store → through the configured storage (may fall back)
    3. Reload → re-read the collection and render it

    Errors never escape to the UI loop: they are shown through the
    notifier and logged.
    """

    def __init__(
        self,
        storage: EntryStorageInterface,
        display: ListDisplay,
        notifier: Optional[Notifier] = None,
        audit_logger: Optional[AuditLogger] = None,
        dispatcher: Optional[RowActionDispatcher] = None,
    ):
        self._storage = storage
        self._display = display
        self._notifier = notifier
        self._audit_logger = audit_logger or AuditLogger()
        self._dispatcher = dispatcher or RowActionDispatcher(
            storage,
            display,
            notifier=notifier,
            audit_logger=self._audit_logger,
        )

    @property
    def storage(self) -> EntryStorageInterface:
        return self._storage

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def _validate(
        self,
        kind: CollectionKind,
        description: str,
        worth_it: bool,
        cost: Optional[Union[Decimal, float, int, str]],
    ) -> Optional[EntryCreate]:
        """Build EntryCreate from raw form values, or show why not."""
        if not description or not description.strip():
            self._show_error(MISSING_DESCRIPTION[kind])
            return None

        amount = None
        if kind is CollectionKind.FINANCE:
            try:
                amount = Decimal(str(cost)) if cost not in (None, "") else None
            except InvalidOperation:
                amount = None
            if amount is None or not amount.is_finite() or amount <= 0:
                self._show_error(INVALID_AMOUNT)
                return None

        try:
            return EntryCreate(description=description, worth_it=worth_it, cost=amount)
        except ValidationError as e:
            logger.info("entry_rejected", collection=kind.value, errors=e.error_count())
            self._show_error(e.errors()[0]["msg"])
            return None

    async def add_entry(
        self,
        kind: CollectionKind,
        description: str,
        worth_it: bool = True,
        cost: Optional[Union[Decimal, float, int, str]] = None,
    ) -> Optional[Entry]:
        """
        Validate and store a new entry, then reload the collection.

        Returns the stored entry, or None if the input was invalid or
        storage failed (the reason is shown via the notifier).
        """
        data = self._validate(kind, description, worth_it, cost)
        if data is None:
            return None

        try:
            entry = await self._storage.add_entry(kind, data)
        except StorageError as e:
            logger.error("add_entry_failed", collection=kind.value, error=str(e))
            self._audit_logger.log_save_failed(kind.value, str(e))
            self._show_error(f"Failed to add {kind.label.lower()} entry")
            return None

        self._audit_logger.log_entry_added(kind.value, entry.id, entry.description)
        self._show_success(ADDED_MESSAGE[kind])
        await self.load_entries(kind)
        return entry

    async def toggle_worth_it(
        self,
        kind: CollectionKind,
        entry_id: str,
        current: bool,
    ) -> Optional[Entry]:
        """Flip the worth-it flag of an entry."""
        patch = EntryPatch(worth_it=not current)

        try:
            entry = await self._storage.update_entry(kind, entry_id, patch)
        except StorageError as e:
            logger.error(
                "toggle_failed",
                collection=kind.value,
                entry_id=entry_id,
                error=str(e),
            )
            self._show_error("Failed to update entry")
            entry = None
        else:
            self._audit_logger.log_entry_updated(kind.value, entry_id, patch.changes())
            self._show_success("Updated successfully")

        await self.load_entries(kind)
        return entry

    async def delete_entry(self, kind: CollectionKind, entry_id: str) -> bool:
        """Delete button path. Always reloads, even after a failure."""
        outcome = await self._dispatcher.delete(kind, entry_id, via="button")
        return outcome.deleted

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    async def load_entries(self, kind: CollectionKind) -> list[Entry]:
        """Read and render a collection. Errors render an empty list."""
        try:
            entries = await self._storage.list_entries(kind)
        except StorageError as e:
            logger.error("load_entries_failed", collection=kind.value, error=str(e))
            self._show_error(f"Failed to load {kind.label.lower()} entries")
            entries = []

        self._display.render(kind, entries)
        return entries

    async def statistics(self, kind: CollectionKind) -> EntryStatistics:
        try:
            entries = await self._storage.list_entries(kind)
        except StorageError as e:
            logger.error("statistics_failed", collection=kind.value, error=str(e))
            return EntryStatistics()
        return EntryStatistics.from_entries(entries)

    async def export_csv(self, kind: CollectionKind) -> Optional[str]:
        """
        Export a collection as CSV.

        Columns: Date, Description, Amount, Worth It (no Amount for media).
        Returns "No data to export" for an empty collection and None when
        storage can't be read (the error is shown through the notifier).
        """
        try:
            entries = await self._storage.list_entries(kind)
        except StorageError as e:
            logger.error("export_failed", collection=kind.value, error=str(e))
            self._show_error(f"Failed to export {kind.label.lower()} entries")
            return None
        if not entries:
            return EMPTY_EXPORT

        with_amount = kind is CollectionKind.FINANCE
        headers = ["Date", "Description"]
        if with_amount:
            headers.append("Amount")
        headers.append("Worth It")

        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(headers)
        for entry in entries:
            row = [format_date(entry.timestamp), entry.description]
            if with_amount:
                row.append(format_currency(entry.cost, symbol=""))
            row.append("Yes" if entry.worth_it else "No")
            writer.writerow(row)

        return buffer.getvalue().rstrip("\n")

    # -------------------------------------------------------------------------
    # Sync
    # -------------------------------------------------------------------------

    async def sync_local_to_remote(self) -> Optional[SyncReport]:
        """
        Upload locally saved entries to the remote store.

        Only meaningful when storage is a fallback chain ending in the
        local store; returns None otherwise.
        """
        if not isinstance(self._storage, FallbackStorage):
            self._show_error("No remote storage configured")
            return None

        strategies = self._storage.strategies
        local = strategies[-1]
        remote = strategies[0]
        if not isinstance(local, LocalJsonStorage) or remote is local:
            self._show_error("No remote storage configured")
            return None

        report = await sync_collections(local, remote)
        self._audit_logger.log_sync_completed(
            report.source,
            report.target,
            {kind.value: result.model_dump() for kind, result in report.results.items()},
        )

        if report.ok:
            self._show_success(f"Synced {report.total_synced} entries")
        else:
            self._show_error("Sync finished with errors")
        return report

    def _show_error(self, message: str) -> None:
        if self._notifier:
            self._notifier.show_error(message)

    def _show_success(self, message: str) -> None:
        if self._notifier:
            self._notifier.show_success(message)


@dataclass
class AppComponents:
    storage: EntryStorageInterface
    display: RenderedList
    notifier: MessageBoard
    audit_logger: AuditLogger
    recognizer: GestureRecognizer
    dispatcher: RowActionDispatcher
    controller: SwipeController
    flow: EntryLogFlow


def create_app_components(
    settings: Optional[Settings] = None,
    storage: Optional[EntryStorageInterface] = None,
    audit_logger: Optional[AuditLogger] = None,
) -> AppComponents:
    """
    Factory function to create all application components.

    Storage falls back to the local store if the configured remote
    backend can't be built, so this never fails on missing credentials.

    Pass `storage` and `audit_logger` to share them between several
    sets of components (one per UI session); the notifier, rendered
    list and swipe state are always created fresh.
    """
    settings = settings or get_settings()
    configure_logging(
        debug=settings.app.debug_mode,
        json_output=settings.app.log_json,
    )

    audit_logger = audit_logger or AuditLogger()
    if storage is None:
        storage = create_storage(settings, audit_logger=audit_logger)
    notifier = MessageBoard()

    recognizer = GestureRecognizer(settings.swipe)
    display = RenderedList(recognizer, audit_logger=audit_logger)
    for kind in CollectionKind:
        display.mount(kind)

    dispatcher = RowActionDispatcher(
        storage,
        display,
        notifier=notifier,
        settings=settings.swipe,
        audit_logger=audit_logger,
    )
    controller = SwipeController(recognizer, dispatcher, audit_logger=audit_logger)
    flow = EntryLogFlow(
        storage,
        display,
        notifier=notifier,
        audit_logger=audit_logger,
        dispatcher=dispatcher,
    )

    logger.info("app_components_created", storage=storage.name)

    return AppComponents(
        storage=storage,
        display=display,
        notifier=notifier,
        audit_logger=audit_logger,
        recognizer=recognizer,
        dispatcher=dispatcher,
        controller=controller,
        flow=flow,
    )
