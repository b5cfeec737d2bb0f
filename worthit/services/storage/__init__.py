"""
Storage Services Package

Provides the abstract storage interface, its interchangeable backends
(local JSON, Google Sheets, GitHub JSON file, generic REST API) and
the fallback chain that strings them together.

The remote backends are imported lazily by the factory so that only
the configured backend's dependencies are touched at runtime.
"""

from worthit.services.storage.interface import (
    EntryStorageInterface,
    NotFoundError,
    StorageError,
    StorageUnavailableError,
)
from worthit.services.storage.local import LocalJsonStorage
from worthit.services.storage.fallback import (
    FailureReason,
    FallbackStorage,
    StorageFailure,
    StorageOutcome,
    SyncReport,
    SyncResult,
    attempt,
    sync_collections,
)
from worthit.services.storage.factory import create_primary_storage, create_storage

__all__ = [
    # Interface
    "EntryStorageInterface",
    # Exceptions
    "NotFoundError",
    "StorageError",
    "StorageUnavailableError",
    # Local implementation
    "LocalJsonStorage",
    # Fallback chain
    "FailureReason",
    "FallbackStorage",
    "StorageFailure",
    "StorageOutcome",
    "SyncReport",
    "SyncResult",
    "attempt",
    "sync_collections",
    # Factory
    "create_primary_storage",
    "create_storage",
]
