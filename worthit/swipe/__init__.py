"""Swipe-to-delete package."""

from worthit.swipe.contracts import ListDisplay, Notifier
from worthit.swipe.recognizer import GestureRecognizer, monotonic_ms
from worthit.swipe.dispatcher import RowActionDispatcher
from worthit.swipe.rows import RenderedList, row_id_for
from worthit.swipe.controller import SwipeController

__all__ = [
    "GestureRecognizer",
    "ListDisplay",
    "Notifier",
    "RenderedList",
    "RowActionDispatcher",
    "SwipeController",
    "monotonic_ms",
    "row_id_for",
]
