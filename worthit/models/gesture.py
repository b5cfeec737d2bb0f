"""
Gesture Models

State for the swipe-to-delete interaction on list rows.

DESIGN DECISION: Gesture state is never attached to row objects.
The recognizer keeps a row_id -> GestureState mapping and removes
the state as soon as the gesture resolves or is cancelled.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from worthit.models.entry import CollectionKind


class PointerKind(str, Enum):
    """Where the pointer events come from."""
    TOUCH = "touch"
    MOUSE = "mouse"  # primary-button drag


class GestureOutcome(str, Enum):
    """How a finished gesture was classified."""
    DELETE = "delete"
    RESET = "reset"


class GestureState(BaseModel):
    """
    One pointer interaction on one row.

    Lives from pointer-down to pointer-up/cancel, never longer.
    """

    start_x: float
    start_y: float
    current_x: float
    start_time_ms: float
    pointer_kind: PointerKind = PointerKind.TOUCH


class RowVisual(BaseModel):
    """What the row currently looks like."""

    offset_px: float = Field(
        default=0.0,
        description="Leftward translation in pixels (positive = moved left)"
    )
    swiping: bool = False
    armed: bool = Field(
        default=False,
        description="Swiped far enough that releasing now would delete"
    )
    exiting: bool = Field(
        default=False,
        description="Exit animation playing (off-screen and fading)"
    )
    opacity: float = Field(default=1.0, ge=0.0, le=1.0)

    def reset(self) -> None:
        self.offset_px = 0.0
        self.swiping = False
        self.armed = False


class SwipeRow(BaseModel):
    """A rendered row the recognizer can be bound to."""

    row_id: str
    entry_id: str
    kind: CollectionKind
    visual: RowVisual = Field(default_factory=RowVisual)


class MoveResult(BaseModel):
    """Effect of a single pointer-move."""

    prevent_default: bool = Field(
        default=False,
        description="True when the move is horizontal and page scrolling must be suppressed"
    )
    offset_px: float = 0.0
    armed: bool = False


class GestureResolution(BaseModel):
    """Result of pointer-up on a tracked row."""

    row_id: str
    entry_id: str
    kind: CollectionKind
    outcome: GestureOutcome
    delta_x: float
    distance: float
    elapsed_ms: float

    @property
    def is_delete(self) -> bool:
        return self.outcome is GestureOutcome.DELETE


class DeleteOutcome(BaseModel):
    """What happened after a confirmed delete gesture."""

    entry_id: str
    kind: CollectionKind
    deleted: bool = False
    error: Optional[str] = None
    reloaded: bool = False
