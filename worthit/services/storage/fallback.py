"""
Storage Fallback Chain

DESIGN DECISION: Fallback is an ordered list of strategies, not nested
try/except blocks. Every attempt produces a StorageOutcome (a value or a
typed StorageFailure); the chain walks the list until one succeeds.

Typical chain: [github, local]. The remote store is tried first, the
local store catches whatever the remote could not take, and with
mirroring on, successful remote writes are copied to the local store
as a backup.

Deletes and updates act on entries the user was shown, so they only
fall through as far as the strategy that served the last read of that
collection. While the remote answers reads, a remote delete failure is
a failure (the local copy is left alone); once reads come from the
local store, so do deletes and updates.
"""

from enum import Enum
from typing import Any, Awaitable, Callable, Iterable, Optional, Sequence, Union

import structlog
from pydantic import BaseModel, Field

from worthit.audit import AuditLogger
from worthit.models.entry import (
    CollectionKind,
    Entry,
    EntryCreate,
    EntryPatch,
    materialize_entry,
)
from worthit.services.storage.interface import (
    EntryStorageInterface,
    NotFoundError,
    StorageError,
    StorageUnavailableError,
)

logger = structlog.get_logger(__name__)


class FailureReason(str, Enum):
    """Why a strategy could not serve a request."""
    UNAVAILABLE = "unavailable"  # unreachable, misconfigured, 5xx
    NOT_FOUND = "not_found"
    REJECTED = "rejected"  # reachable but refused the request


class StorageFailure(BaseModel):
    """A single failed attempt."""

    backend: str
    operation: str
    reason: FailureReason
    message: str


class StorageOutcome(BaseModel):
    """Result of one attempt: either a value or a failure."""

    backend: str
    value: Any = None
    failure: Optional[StorageFailure] = None

    @property
    def ok(self) -> bool:
        return self.failure is None


async def attempt(
    strategy: EntryStorageInterface,
    operation: str,
    call: Callable[[EntryStorageInterface], Awaitable[Any]],
) -> StorageOutcome:
    """
    Run one storage call and convert storage errors into a typed outcome.

    Only StorageError and its subclasses become failures; anything else
    (e.g. invalid input) propagates.
    """
    try:
        value = await call(strategy)
    except NotFoundError as e:
        reason, message = FailureReason.NOT_FOUND, str(e)
    except StorageUnavailableError as e:
        reason, message = FailureReason.UNAVAILABLE, str(e)
    except StorageError as e:
        reason, message = FailureReason.REJECTED, str(e)
    else:
        return StorageOutcome(backend=strategy.name, value=value)

    return StorageOutcome(
        backend=strategy.name,
        failure=StorageFailure(
            backend=strategy.name,
            operation=operation,
            reason=reason,
            message=message,
        ),
    )


class FallbackStorage(EntryStorageInterface):
    """
    Entry storage that tries several backends in order.
    """

    name = "fallback"

    def __init__(
        self,
        strategies: Sequence[EntryStorageInterface],
        mirror: bool = True,
        audit_logger: Optional[AuditLogger] = None,
    ):
        if not strategies:
            raise ValueError("FallbackStorage needs at least one strategy")
        self._strategies = list(strategies)
        self._mirror = mirror
        self._audit_logger = audit_logger
        self._read_from: dict[CollectionKind, int] = {}
        self.last_outcomes: list[StorageOutcome] = []

    @property
    def strategies(self) -> list[EntryStorageInterface]:
        return list(self._strategies)

    @property
    def primary(self) -> EntryStorageInterface:
        return self._strategies[0]

    def read_source(self, kind: CollectionKind) -> EntryStorageInterface:
        """The strategy that served the latest read of a collection."""
        return self._strategies[self._read_from.get(kind, 0)]

    async def _run(
        self,
        operation: str,
        call: Callable[[EntryStorageInterface], Awaitable[Any]],
        last: Optional[int] = None,
    ) -> tuple[StorageOutcome, int]:
        """Try strategies in order, up to and including index `last`."""
        candidates = self._strategies if last is None else self._strategies[:last + 1]
        outcomes: list[StorageOutcome] = []
        for index, strategy in enumerate(candidates):
            outcome = await attempt(strategy, operation, call)
            outcomes.append(outcome)
            if outcome.ok:
                self.last_outcomes = outcomes
                return outcome, index

            failure = outcome.failure
            logger.warning(
                "storage_strategy_failed",
                backend=failure.backend,
                operation=operation,
                reason=failure.reason.value,
                error=failure.message,
            )
            if self._audit_logger and index + 1 < len(candidates):
                self._audit_logger.log_storage_fallback(
                    failure.backend, operation, failure.message
                )

        self.last_outcomes = outcomes
        raise self._exhausted(operation, outcomes)

    @staticmethod
    def _exhausted(operation: str, outcomes: list[StorageOutcome]) -> StorageError:
        failures = [o.failure for o in outcomes if o.failure]
        summary = "; ".join(f"{f.backend}: {f.message}" for f in failures)
        if any(f.reason is FailureReason.NOT_FOUND for f in failures):
            return NotFoundError(f"{operation} failed ({summary})")
        return StorageUnavailableError(f"{operation} failed ({summary})")

    async def _mirror_to(
        self,
        after_index: int,
        operation: str,
        call: Callable[[EntryStorageInterface], Awaitable[Any]],
    ) -> None:
        """Best-effort copy of a successful write to the later strategies."""
        if not self._mirror:
            return
        for strategy in self._strategies[after_index + 1:]:
            outcome = await attempt(strategy, operation, call)
            if not outcome.ok:
                logger.warning(
                    "storage_mirror_failed",
                    backend=strategy.name,
                    operation=operation,
                    error=outcome.failure.message,
                )

    async def add_entry(
        self,
        kind: CollectionKind,
        data: Union[EntryCreate, Entry],
    ) -> Entry:
        # Materialize once so every backend stores the same ID
        entry = materialize_entry(kind, data)
        outcome, index = await self._run(
            "add_entry", lambda s: s.add_entry(kind, entry)
        )
        stored: Entry = outcome.value
        await self._mirror_to(index, "add_entry", lambda s: s.add_entry(kind, stored))
        return stored

    async def delete_entry(self, kind: CollectionKind, entry_id: str) -> bool:
        outcome, index = await self._run(
            "delete_entry",
            lambda s: s.delete_entry(kind, entry_id),
            last=self._read_from.get(kind, 0),
        )
        await self._mirror_to(
            index, "delete_entry", lambda s: s.delete_entry(kind, entry_id)
        )
        return bool(outcome.value)

    async def list_entries(self, kind: CollectionKind) -> list[Entry]:
        outcome, index = await self._run("list_entries", lambda s: s.list_entries(kind))
        self._read_from[kind] = index
        return list(outcome.value)

    async def update_entry(
        self,
        kind: CollectionKind,
        entry_id: str,
        patch: EntryPatch,
    ) -> Entry:
        outcome, index = await self._run(
            "update_entry",
            lambda s: s.update_entry(kind, entry_id, patch),
            last=self._read_from.get(kind, 0),
        )
        updated: Entry = outcome.value

        async def mirror_update(strategy: EntryStorageInterface) -> Entry:
            try:
                return await strategy.update_entry(kind, entry_id, patch)
            except NotFoundError:
                # Backup never saw the entry; store the updated copy
                return await strategy.add_entry(kind, updated)

        await self._mirror_to(index, "update_entry", mirror_update)
        return updated

    async def replace_entries(
        self,
        kind: CollectionKind,
        entries: list[Entry],
    ) -> None:
        _, index = await self._run(
            "replace_entries", lambda s: s.replace_entries(kind, entries)
        )
        await self._mirror_to(
            index, "replace_entries", lambda s: s.replace_entries(kind, entries)
        )


# =============================================================================
# SYNC
# =============================================================================

class SyncResult(BaseModel):
    """Sync result for one collection."""

    synced: int = Field(default=0, ge=0)
    errors: int = Field(default=0, ge=0)
    error_message: Optional[str] = None


class SyncReport(BaseModel):
    """Sync results per collection kind."""

    source: str
    target: str
    results: dict[CollectionKind, SyncResult] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return all(r.errors == 0 for r in self.results.values())

    @property
    def total_synced(self) -> int:
        return sum(r.synced for r in self.results.values())


async def sync_collections(
    source: EntryStorageInterface,
    target: EntryStorageInterface,
    kinds: Iterable[CollectionKind] = tuple(CollectionKind),
) -> SyncReport:
    """
    Push every non-empty collection of `source` into `target`.

    Used to upload entries saved locally while the remote store was
    unavailable (or before it was configured). Each collection is
    handled on its own; one failing does not stop the others.
    """
    report = SyncReport(source=source.name, target=target.name)

    for kind in kinds:
        result = SyncResult()
        try:
            entries = await source.list_entries(kind)
            if entries:
                await target.replace_entries(kind, entries)
                result.synced = len(entries)
        except StorageError as e:
            result.errors = 1
            result.error_message = str(e)
            logger.error(
                "sync_failed",
                collection=kind.value,
                source=source.name,
                target=target.name,
                error=str(e),
            )
        report.results[kind] = result

    return report
