"""
Storage factory: builds the configured backend and its fallback chain.
"""

from typing import Optional

import structlog

from worthit.audit import AuditLogger
from worthit.config import Settings, get_settings
from worthit.services.storage.fallback import FallbackStorage
from worthit.services.storage.interface import EntryStorageInterface
from worthit.services.storage.local import LocalJsonStorage

logger = structlog.get_logger(__name__)


def create_primary_storage(settings: Settings) -> EntryStorageInterface:
    """Instantiate the backend named by STORAGE_BACKEND."""
    backend = settings.storage.backend

    if backend == "sheets":
        from worthit.services.storage.google_sheets import (
            GoogleSheetsClient,
            GoogleSheetsEntryStorage,
        )
        return GoogleSheetsEntryStorage(GoogleSheetsClient(settings.google_sheets))
    if backend == "github":
        from worthit.services.storage.github import GitHubJsonStorage
        return GitHubJsonStorage(settings.github)
    if backend == "rest":
        from worthit.services.storage.rest import RestApiStorage
        return RestApiStorage(settings.rest_api)

    return LocalJsonStorage(settings=settings.storage)


def create_storage(
    settings: Optional[Settings] = None,
    audit_logger: Optional[AuditLogger] = None,
) -> EntryStorageInterface:
    """
    Build the storage used by the app.

    Remote backends are wrapped as [remote, local] unless fallback is
    disabled. If the remote backend can't even be constructed (e.g.
    missing Sheets settings) the local store is used on its own.
    """
    settings = settings or get_settings()
    storage_settings = settings.storage
    local = LocalJsonStorage(settings=storage_settings)

    if storage_settings.backend == "local":
        return local

    try:
        primary = create_primary_storage(settings)
    except Exception as e:
        if not storage_settings.fallback_to_local:
            raise
        logger.warning(
            "primary_storage_unavailable",
            backend=storage_settings.backend,
            error=str(e),
        )
        if audit_logger:
            audit_logger.log_storage_fallback(storage_settings.backend, "startup", str(e))
        return local

    if not storage_settings.fallback_to_local:
        return primary

    return FallbackStorage(
        [primary, local],
        mirror=storage_settings.mirror_writes,
        audit_logger=audit_logger,
    )
