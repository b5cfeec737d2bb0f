"""
Swipe-to-Delete Gesture Recognizer

Tracks pointer/touch movement on list rows and decides, at release,
whether the interaction was a delete swipe.

States per row:

    Idle --down--> Tracking --up--> Resolved-Delete | Resolved-Reset
                       |
                       +--cancel--> Idle

Both resolved states are terminal: the gesture state is dropped and the
row is Idle again. A delete needs all three of:

    deltaX   <= -(arm_ratio * threshold)     leftward
    distance >=   arm_ratio * threshold      far enough
    elapsed  <    time_limit                 quick enough

With the defaults (100px, 0.6, 1000ms) that is 60px left within a second.

None of the handlers raise. Events for unknown rows, moves without a
pointer-down and repeated pointer-ups are normal pointer noise and are
ignored.
"""

import time
from typing import Callable, Iterable, Optional

import structlog

from worthit.config import SwipeSettings, get_settings
from worthit.models.entry import CollectionKind
from worthit.models.gesture import (
    GestureOutcome,
    GestureResolution,
    GestureState,
    MoveResult,
    PointerKind,
    RowVisual,
    SwipeRow,
)

logger = structlog.get_logger(__name__)

Clock = Callable[[], float]

# MouseEvent.buttons value while only the primary button is held
PRIMARY_BUTTON = 1


def monotonic_ms() -> float:
    return time.monotonic() * 1000.0


class GestureRecognizer:
    """
    Classifies pointer interactions on bound rows.

    Owns two mappings: the rows it is bound to (row_id -> SwipeRow)
    and the active gestures (row_id -> GestureState). A row has at most
    one active gesture; a new pointer-down overwrites the old one.
    """

    def __init__(
        self,
        settings: Optional[SwipeSettings] = None,
        clock: Optional[Clock] = None,
    ):
        self._settings = settings or get_settings().swipe
        self._clock = clock or monotonic_ms
        self._rows: dict[str, SwipeRow] = {}
        self._states: dict[str, GestureState] = {}

    @property
    def settings(self) -> SwipeSettings:
        return self._settings

    # -------------------------------------------------------------------------
    # Bindings
    # -------------------------------------------------------------------------

    def bind_rows(self, kind: CollectionKind, rows: Iterable[SwipeRow]) -> None:
        """Replace every binding of `kind` with `rows`."""
        self.unbind(kind)
        for row in rows:
            self._rows[row.row_id] = row
        logger.debug("swipe_rows_bound", collection=kind.value, rows=len(self.rows(kind)))

    def unbind(self, kind: CollectionKind) -> None:
        stale = [row_id for row_id, row in self._rows.items() if row.kind is kind]
        for row_id in stale:
            del self._rows[row_id]
            self._states.pop(row_id, None)

    def rows(self, kind: CollectionKind) -> list[SwipeRow]:
        return [row for row in self._rows.values() if row.kind is kind]

    def row(self, row_id: Optional[str]) -> Optional[SwipeRow]:
        if row_id is None:
            return None
        return self._rows.get(row_id)

    def visual(self, row_id: Optional[str]) -> Optional[RowVisual]:
        row = self.row(row_id)
        return row.visual if row else None

    def is_tracking(self, row_id: Optional[str]) -> bool:
        return row_id is not None and row_id in self._states

    # -------------------------------------------------------------------------
    # Pointer events
    # -------------------------------------------------------------------------

    def on_pointer_down(
        self,
        row_id: Optional[str],
        x: float,
        y: float,
        is_touch: bool = True,
        timestamp_ms: Optional[float] = None,
    ) -> bool:
        """
        Start tracking a gesture on a row.

        Returns True if tracking started.
        """
        row = self.row(row_id)
        if row is None or row.visual.exiting:
            return False

        self._states[row.row_id] = GestureState(
            start_x=x,
            start_y=y,
            current_x=x,
            start_time_ms=self._now(timestamp_ms),
            pointer_kind=PointerKind.TOUCH if is_touch else PointerKind.MOUSE,
        )
        row.visual.swiping = True
        return True

    def on_pointer_move(
        self,
        row_id: Optional[str],
        x: float,
        y: float,
        buttons: Optional[int] = None,
    ) -> MoveResult:
        """
        Follow the pointer.

        Vertical moves are left to the page (scrolling). Horizontal moves
        suppress scrolling; leftward ones drag the row, capped at the
        threshold, and arm it past arm_ratio * threshold.
        """
        state = self._states.get(row_id) if row_id is not None else None
        row = self.row(row_id)
        if state is None or row is None:
            return MoveResult()

        # Mouse drags only count while the primary button is held
        if (
            state.pointer_kind is PointerKind.MOUSE
            and buttons is not None
            and buttons != PRIMARY_BUTTON
        ):
            return MoveResult(offset_px=row.visual.offset_px, armed=row.visual.armed)

        delta_x = x - state.start_x
        delta_y = y - state.start_y

        if abs(delta_y) > abs(delta_x):
            return MoveResult(offset_px=row.visual.offset_px, armed=row.visual.armed)

        state.current_x = x

        if delta_x < 0:
            threshold = self._settings.threshold_px
            offset = min(abs(delta_x), threshold)
            row.visual.offset_px = offset
            row.visual.armed = offset > self._settings.delete_distance_px
        else:
            # Back to (or right of) the start: the row sits at rest
            row.visual.offset_px = 0.0
            row.visual.armed = False

        return MoveResult(
            prevent_default=True,
            offset_px=row.visual.offset_px,
            armed=row.visual.armed,
        )

    def on_pointer_up(
        self,
        row_id: Optional[str],
        timestamp_ms: Optional[float] = None,
    ) -> Optional[GestureResolution]:
        """
        Finish the gesture and classify it.

        Returns None when nothing was being tracked (e.g. a second
        pointer-up), otherwise the resolution. Rows that do not qualify
        for a delete snap back to rest.
        """
        if row_id is None:
            return None
        state = self._states.pop(row_id, None)
        row = self.row(row_id)
        if state is None or row is None:
            return None

        delta_x = state.current_x - state.start_x
        distance = abs(delta_x)
        elapsed = self._now(timestamp_ms) - state.start_time_ms
        min_distance = self._settings.delete_distance_px

        should_delete = (
            delta_x <= -min_distance
            and distance >= min_distance
            and elapsed < self._settings.time_limit_ms
        )

        row.visual.swiping = False
        if not should_delete:
            row.visual.offset_px = 0.0
            row.visual.armed = False

        resolution = GestureResolution(
            row_id=row.row_id,
            entry_id=row.entry_id,
            kind=row.kind,
            outcome=GestureOutcome.DELETE if should_delete else GestureOutcome.RESET,
            delta_x=delta_x,
            distance=distance,
            elapsed_ms=elapsed,
        )
        logger.debug(
            "swipe_resolved",
            row_id=row.row_id,
            outcome=resolution.outcome.value,
            delta_x=delta_x,
            elapsed_ms=elapsed,
        )
        return resolution

    def on_pointer_cancel(self, row_id: Optional[str]) -> None:
        """Abandon the gesture (pointer left the row, touch cancelled)."""
        if row_id is None:
            return
        self._states.pop(row_id, None)
        row = self.row(row_id)
        if row is not None and not row.visual.exiting:
            row.visual.reset()

    def _now(self, timestamp_ms: Optional[float]) -> float:
        return self._clock() if timestamp_ms is None else timestamp_ms
