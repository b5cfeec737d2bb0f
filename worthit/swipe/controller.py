"""Wires pointer events through the recognizer to the dispatcher."""

from typing import Optional

from worthit.audit import AuditLogger
from worthit.models.gesture import DeleteOutcome, GestureResolution, MoveResult
from worthit.swipe.dispatcher import RowActionDispatcher
from worthit.swipe.recognizer import GestureRecognizer


class SwipeController:
    """
    Single entry point for pointer events on list rows.

    pointer_up awaits the dispatcher when the gesture resolves as a
    delete; every other handler is synchronous.
    """

    def __init__(
        self,
        recognizer: GestureRecognizer,
        dispatcher: RowActionDispatcher,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self.recognizer = recognizer
        self.dispatcher = dispatcher
        self._audit_logger = audit_logger
        self.last_delete: Optional[DeleteOutcome] = None

    def pointer_down(
        self,
        row_id: Optional[str],
        x: float,
        y: float,
        is_touch: bool = True,
        timestamp_ms: Optional[float] = None,
    ) -> bool:
        return self.recognizer.on_pointer_down(row_id, x, y, is_touch, timestamp_ms)

    def pointer_move(
        self,
        row_id: Optional[str],
        x: float,
        y: float,
        buttons: Optional[int] = None,
    ) -> MoveResult:
        return self.recognizer.on_pointer_move(row_id, x, y, buttons)

    async def pointer_up(
        self,
        row_id: Optional[str],
        timestamp_ms: Optional[float] = None,
    ) -> Optional[GestureResolution]:
        resolution = self.recognizer.on_pointer_up(row_id, timestamp_ms)
        if resolution is None or not resolution.is_delete:
            return resolution

        if self._audit_logger:
            self._audit_logger.log_swipe_delete(
                resolution.kind.value,
                resolution.entry_id,
                resolution.distance,
                resolution.elapsed_ms,
            )

        self.last_delete = await self.dispatcher.on_delete_confirmed(
            self.recognizer.row(resolution.row_id),
            resolution.entry_id,
            resolution.kind,
        )
        return resolution

    def pointer_cancel(self, row_id: Optional[str]) -> None:
        self.recognizer.on_pointer_cancel(row_id)
