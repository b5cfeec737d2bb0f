"""
Tests for the swipe delete path: rendered list, dispatcher and controller.

Storage is the in-memory backend from conftest; failures are switched on
per operation to check that the list is always re-rendered from storage.
"""

from datetime import datetime, timedelta, timezone

import pytest

from worthit.audit import AuditLogger
from worthit.models.audit import AuditEventType
from worthit.models.entry import CollectionKind
from worthit.services.storage import FallbackStorage
from worthit.swipe import (
    GestureRecognizer,
    RenderedList,
    RowActionDispatcher,
    SwipeController,
)
from worthit.ui.feedback import MessageBoard

from conftest import InMemoryStorage, make_entry


FINANCE = CollectionKind.FINANCE


class SwipeHarness:
    """All swipe components wired against one storage."""

    def __init__(self, storage, settings, audit_logger):
        self.storage = storage
        self.audit_logger = audit_logger
        self.notifier = MessageBoard()
        self.delays: list[float] = []
        self.recognizer = GestureRecognizer(settings, clock=lambda: 0.0)
        self.display = RenderedList(self.recognizer, audit_logger=audit_logger)
        self.display.mount(FINANCE)
        self.dispatcher = RowActionDispatcher(
            storage,
            self.display,
            notifier=self.notifier,
            settings=settings,
            audit_logger=audit_logger,
            sleep=self._sleep,
        )
        self.controller = SwipeController(
            self.recognizer, self.dispatcher, audit_logger=audit_logger
        )

    async def _sleep(self, seconds: float) -> None:
        self.delays.append(seconds)

    async def swipe_left(self, row_id: str, distance: float = 110, elapsed: float = 350):
        self.controller.pointer_down(row_id, 200, 100, timestamp_ms=0)
        self.controller.pointer_move(row_id, 200 - distance, 105)
        return await self.controller.pointer_up(row_id, timestamp_ms=elapsed)

    def event_types(self) -> list[AuditEventType]:
        return [e.event_type for e in self.audit_logger.recent()]


@pytest.fixture
def coffee():
    return make_entry(description="Coffee", id="coffee1")


@pytest.fixture
def harness(memory_storage, swipe_settings, audit_logger, coffee):
    memory_storage.data[FINANCE] = [coffee]
    harness = SwipeHarness(memory_storage, swipe_settings, audit_logger)
    harness.display.render(FINANCE, [coffee])
    return harness


class TestSwipeDelete:
    """A confirmed swipe deletes and re-renders."""

    @pytest.mark.asyncio
    async def test_swipe_deletes_entry(self, harness):
        """Test the documented quick swipe removes the entry from storage and view."""
        resolution = await harness.swipe_left("finance-coffee1")

        assert resolution.is_delete
        assert harness.storage.data[FINANCE] == []
        assert harness.display.rows(FINANCE) == []
        assert harness.controller.last_delete.deleted is True
        assert harness.controller.last_delete.reloaded is True
        assert harness.notifier.messages[-1].text == "Entry deleted successfully"

    @pytest.mark.asyncio
    async def test_exit_animation_waits_before_delete(self, harness):
        """Test the dispatcher waits for the animation delay."""
        await harness.swipe_left("finance-coffee1")
        assert harness.delays == [pytest.approx(0.3)]

    @pytest.mark.asyncio
    async def test_no_wait_without_animation(self, harness, swipe_settings):
        """Test a zero animation delay skips the wait."""
        harness.dispatcher._settings = swipe_settings.model_copy(
            update={"animation_delay_ms": 0}
        )
        await harness.swipe_left("finance-coffee1")
        assert harness.delays == []
        assert harness.storage.data[FINANCE] == []

    @pytest.mark.asyncio
    async def test_swipe_is_audited(self, harness):
        """Test the swipe and the delete both reach the audit trail."""
        await harness.swipe_left("finance-coffee1")

        types = harness.event_types()
        assert AuditEventType.SWIPE_DELETE_CONFIRMED in types
        assert AuditEventType.ENTRY_DELETED in types
        deleted = next(
            e for e in harness.audit_logger.recent()
            if e.event_type is AuditEventType.ENTRY_DELETED
        )
        assert deleted.details["via"] == "swipe"
        assert deleted.entry_id == "coffee1"

    @pytest.mark.asyncio
    async def test_short_swipe_does_not_dispatch(self, harness):
        """Test a non-delete gesture never reaches storage."""
        resolution = await harness.swipe_left("finance-coffee1", distance=50)

        assert not resolution.is_delete
        assert ("delete_entry", FINANCE) not in harness.storage.calls
        assert harness.controller.last_delete is None
        assert len(harness.display.rows(FINANCE)) == 1

    @pytest.mark.asyncio
    async def test_slow_swipe_does_not_dispatch(self, harness):
        """Test a swipe past the time limit never reaches storage."""
        await harness.swipe_left("finance-coffee1", distance=120, elapsed=1200)
        assert harness.storage.data[FINANCE] != []

    @pytest.mark.asyncio
    async def test_pointer_up_without_gesture(self, harness):
        """Test pointer-up with nothing tracked returns None."""
        assert await harness.controller.pointer_up("finance-coffee1", timestamp_ms=10) is None

    def test_pointer_cancel_resets(self, harness):
        """Test cancel through the controller resets the row."""
        harness.controller.pointer_down("finance-coffee1", 200, 100, timestamp_ms=0)
        harness.controller.pointer_move("finance-coffee1", 100, 100)
        harness.controller.pointer_cancel("finance-coffee1")
        assert harness.recognizer.visual("finance-coffee1").offset_px == 0


class TestFailedDelete:
    """Failed deletes must never leave the row hidden."""

    @pytest.mark.asyncio
    async def test_failed_delete_rerenders_entry_with_error(self, harness):
        """Test the list is re-read from storage and still shows the entry."""
        harness.storage.failing = {"delete_entry"}
        renders_before = harness.display.render_count[FINANCE]

        resolution = await harness.swipe_left("finance-coffee1")

        assert resolution.is_delete
        assert harness.display.render_count[FINANCE] == renders_before + 1
        rows = harness.display.rows(FINANCE)
        assert [r.entry_id for r in rows] == ["coffee1"]
        assert rows[0].visual.exiting is False
        assert harness.notifier.last_error == "Failed to delete entry"

        outcome = harness.controller.last_delete
        assert outcome.deleted is False
        assert outcome.error
        assert outcome.reloaded is True
        assert AuditEventType.DELETE_FAILED in harness.event_types()

    @pytest.mark.asyncio
    async def test_remote_delete_failure_with_local_backup(
        self, swipe_settings, audit_logger, coffee
    ):
        """Test a delete the remote refuses is an error even though the backup holds the entry."""
        remote, backup = InMemoryStorage("remote"), InMemoryStorage("local")
        remote.data[FINANCE] = [coffee]
        backup.data[FINANCE] = [coffee]
        harness = SwipeHarness(
            FallbackStorage([remote, backup], audit_logger=audit_logger),
            swipe_settings,
            audit_logger,
        )
        await harness.dispatcher.reload(FINANCE)
        remote.failing = {"delete_entry"}

        await harness.swipe_left("finance-coffee1")

        outcome = harness.controller.last_delete
        assert outcome.deleted is False
        assert outcome.error
        assert outcome.reloaded is True
        assert [m.text for m in harness.notifier.messages] == ["Failed to delete entry"]
        assert [r.entry_id for r in harness.display.rows(FINANCE)] == ["coffee1"]
        assert [e.id for e in backup.data[FINANCE]] == ["coffee1"]

    @pytest.mark.asyncio
    async def test_rerendered_row_can_be_swiped_again(self, harness):
        """Test the fresh row is bound to the recognizer after a failure."""
        harness.storage.failing = {"delete_entry"}
        await harness.swipe_left("finance-coffee1")

        harness.storage.failing = set()
        await harness.swipe_left("finance-coffee1")
        assert harness.storage.data[FINANCE] == []

    @pytest.mark.asyncio
    async def test_row_restored_when_reload_also_fails(self, harness):
        """Test the animated row comes back if storage can't be read either."""
        row = harness.display.row_for_entry(FINANCE, "coffee1")
        harness.storage.failing = {"*"}

        await harness.swipe_left("finance-coffee1")

        assert harness.controller.last_delete.reloaded is False
        assert row.visual.exiting is False
        assert row.visual.opacity == 1.0
        assert row.visual.offset_px == 0
        errors = [m.text for m in harness.notifier.messages]
        assert "Failed to delete entry" in errors
        assert "Failed to load finance entries" in errors


class TestRowActionDispatcher:
    """Direct dispatcher behavior."""

    def test_play_exit_animation(self, harness):
        """Test the row slides off and fades out."""
        row = harness.display.rows(FINANCE)[0]
        RowActionDispatcher.play_exit_animation(row)
        assert row.visual.exiting is True
        assert row.visual.opacity == 0.0
        assert row.visual.offset_px > harness.recognizer.settings.threshold_px

    @pytest.mark.asyncio
    async def test_delete_missing_entry(self, harness):
        """Test deleting an unknown ID reports nothing deleted but reloads."""
        outcome = await harness.dispatcher.delete(FINANCE, "nope")
        assert outcome.deleted is False
        assert outcome.error is None
        assert outcome.reloaded is True
        assert harness.notifier.messages == []

    @pytest.mark.asyncio
    async def test_corrupt_local_store_is_reported(self, local_storage, swipe_settings, display):
        """Test an undecodable collection file is shown as an error, not raised."""
        path = local_storage.path_for(FINANCE)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(b"[\xff\xfe]")
        notifier = MessageBoard()
        dispatcher = RowActionDispatcher(
            local_storage, display, notifier=notifier, settings=swipe_settings
        )

        outcome = await dispatcher.delete(FINANCE, "x")

        assert outcome.error
        assert outcome.reloaded is False
        assert [m.text for m in notifier.messages] == [
            "Failed to delete entry",
            "Failed to load finance entries",
        ]

    @pytest.mark.asyncio
    async def test_delete_without_notifier(self, memory_storage, swipe_settings, display):
        """Test the dispatcher works without a notifier."""
        memory_storage.failing = {"delete_entry"}
        dispatcher = RowActionDispatcher(memory_storage, display, settings=swipe_settings)
        outcome = await dispatcher.delete(FINANCE, "x")
        assert outcome.error
        assert display.last == (FINANCE, [])


class TestRenderedList:
    """Rows are rebuilt (and re-bound) on every render."""

    def test_render_orders_newest_first(self, swipe_settings):
        """Test rows are displayed newest first."""
        base = datetime(2024, 1, 1, tzinfo=timezone.utc)
        old = make_entry(description="Old", id="old", timestamp=base)
        new = make_entry(description="New", id="new", timestamp=base + timedelta(days=1))

        display = RenderedList(GestureRecognizer(swipe_settings))
        display.mount(FINANCE)
        assert display.render(FINANCE, [old, new]) is True

        assert [r.entry_id for r in display.rows(FINANCE)] == ["new", "old"]
        assert [e.id for e in display.entries(FINANCE)] == ["new", "old"]
        assert display.rows(FINANCE)[0].row_id == "finance-new"

    def test_render_mixed_timestamp_zones(self, swipe_settings):
        """Test entries with and without a zone sort together."""
        aware = make_entry(id="aware", timestamp=datetime(2024, 1, 1, tzinfo=timezone.utc))
        naive = make_entry(id="naive", timestamp=datetime(2024, 1, 2))

        display = RenderedList(GestureRecognizer(swipe_settings))
        display.mount(FINANCE)
        assert display.render(FINANCE, [aware, naive]) is True
        assert [r.entry_id for r in display.rows(FINANCE)] == ["naive", "aware"]

    def test_render_rebinds_recognizer(self, swipe_settings, coffee):
        """Test old rows are unbound and new rows bound after a render."""
        recognizer = GestureRecognizer(swipe_settings)
        display = RenderedList(recognizer)
        display.mount(FINANCE)
        display.render(FINANCE, [coffee])
        first_row = recognizer.row("finance-coffee1")

        display.render(FINANCE, [coffee])
        second_row = recognizer.row("finance-coffee1")

        assert second_row is not None
        assert second_row is not first_row
        assert second_row is display.row_for_entry(FINANCE, "coffee1")

    def test_render_missing_target(self, swipe_settings, coffee):
        """Test rendering an unmounted collection is logged, not raised."""
        audit_logger = AuditLogger()
        display = RenderedList(GestureRecognizer(swipe_settings), audit_logger=audit_logger)

        assert display.render(CollectionKind.MEDIA, []) is False
        assert display.rows(CollectionKind.MEDIA) == []
        event = audit_logger.recent()[0]
        assert event.event_type is AuditEventType.RENDER_TARGET_MISSING
        assert event.collection == "media"

    def test_unmount_unbinds_rows(self, swipe_settings, coffee):
        """Test unmounting removes the rows from the recognizer."""
        recognizer = GestureRecognizer(swipe_settings)
        display = RenderedList(recognizer)
        display.mount(FINANCE)
        display.render(FINANCE, [coffee])

        display.unmount(FINANCE)
        assert recognizer.row("finance-coffee1") is None
        assert not display.is_mounted(FINANCE)

    def test_attach_recognizer_binds_existing_rows(self, swipe_settings, coffee):
        """Test a recognizer attached later sees the current rows."""
        display = RenderedList()
        display.mount(FINANCE)
        display.render(FINANCE, [coffee])

        recognizer = GestureRecognizer(swipe_settings)
        display.attach_recognizer(recognizer)
        assert recognizer.row("finance-coffee1") is not None

    def test_entry_for_row(self, swipe_settings, coffee):
        """Test a row maps back to its entry."""
        display = RenderedList()
        display.mount(FINANCE)
        display.render(FINANCE, [coffee])
        row = display.rows(FINANCE)[0]
        assert display.entry_for_row(row) == coffee


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
