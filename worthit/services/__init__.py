"""Services package."""

from worthit.services.storage import (
    EntryStorageInterface,
    FallbackStorage,
    LocalJsonStorage,
    NotFoundError,
    StorageError,
    StorageUnavailableError,
    create_storage,
    sync_collections,
)

__all__ = [
    "EntryStorageInterface",
    "FallbackStorage",
    "LocalJsonStorage",
    "NotFoundError",
    "StorageError",
    "StorageUnavailableError",
    "create_storage",
    "sync_collections",
]
