"""
Collaborator contracts for the swipe layer.

The recognizer and dispatcher only need something that can redraw a
collection and something that can tell the user what happened.
"""

from typing import Protocol, runtime_checkable

from worthit.models.entry import CollectionKind, Entry


@runtime_checkable
class ListDisplay(Protocol):
    """Redraws a collection of rows."""

    def render(self, kind: CollectionKind, entries: list[Entry]) -> object:
        """
        Re-draw the rows of `kind`.

        Implementations must re-bind the gesture recognizer to the new
        rows; bindings do not survive a render.
        """
        ...


@runtime_checkable
class Notifier(Protocol):
    """User-visible feedback."""

    def show_error(self, message: str) -> None: ...

    def show_success(self, message: str) -> None: ...
