"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Pick the backend (local file, Sheets, GitHub, REST) from configuration
2. Chain backends so a failing remote falls back to the local store
3. Use a local temp directory for testing
4. Keep the swipe/dispatch code unaware of where entries live

The interface is intentionally small - the four entry operations
plus a bulk replace used when syncing one store into another.
"""

from abc import ABC, abstractmethod
from typing import Union

from worthit.models.entry import (
    CollectionKind,
    Entry,
    EntryCreate,
    EntryPatch,
)


class EntryStorageInterface(ABC):
    """
    Abstract interface for entry storage operations.

    Any storage implementation must implement these methods.
    """

    #: Short backend name used in logs and fallback reports
    name: str = "storage"

    @abstractmethod
    async def add_entry(
        self,
        kind: CollectionKind,
        data: Union[EntryCreate, Entry],
    ) -> Entry:
        """
        Store a new entry.

        Args:
            kind: Collection to add to
            data: Form data, or an already materialized Entry

        Returns:
            The stored entry (with ID and timestamp)

        Raises:
            StorageError: If the save fails
        """
        pass

    @abstractmethod
    async def delete_entry(self, kind: CollectionKind, entry_id: str) -> bool:
        """
        Delete an entry by ID.

        Returns:
            True if an entry was removed, False if there was none

        Raises:
            StorageError: If the backend could not be updated
        """
        pass

    @abstractmethod
    async def list_entries(self, kind: CollectionKind) -> list[Entry]:
        """
        List every entry of a collection, in storage order.
        """
        pass

    @abstractmethod
    async def update_entry(
        self,
        kind: CollectionKind,
        entry_id: str,
        patch: EntryPatch,
    ) -> Entry:
        """
        Apply a partial update to an entry.

        Raises:
            NotFoundError: If the entry doesn't exist
            StorageError: If the update fails
        """
        pass

    @abstractmethod
    async def replace_entries(
        self,
        kind: CollectionKind,
        entries: list[Entry],
    ) -> None:
        """
        Overwrite a whole collection (used by sync).
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entry not found in storage."""
    pass


class StorageUnavailableError(StorageError):
    """Backend unreachable, misconfigured or refusing requests."""
    pass
