"""Shared fixtures: an in-memory storage backend and recording collaborators."""

from typing import Optional, Union

import pytest

from worthit.audit import AuditLogger
from worthit.config import StorageSettings, SwipeSettings
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
    StorageUnavailableError,
)
from worthit.services.storage.local import LocalJsonStorage


class InMemoryStorage(EntryStorageInterface):
    """Storage backed by dicts, with switchable failures per operation."""

    def __init__(self, name: str = "memory"):
        self.name = name
        self.data: dict[CollectionKind, list[Entry]] = {kind: [] for kind in CollectionKind}
        self.failing: set[str] = set()
        self.calls: list[tuple[str, CollectionKind]] = []

    def _check(self, operation: str, kind: CollectionKind) -> None:
        self.calls.append((operation, kind))
        if operation in self.failing or "*" in self.failing:
            raise StorageUnavailableError(f"{self.name} is down")

    async def add_entry(self, kind: CollectionKind, data: Union[EntryCreate, Entry]) -> Entry:
        self._check("add_entry", kind)
        entry = materialize_entry(kind, data)
        self.data[kind] = [e for e in self.data[kind] if e.id != entry.id] + [entry]
        return entry

    async def delete_entry(self, kind: CollectionKind, entry_id: str) -> bool:
        self._check("delete_entry", kind)
        before = len(self.data[kind])
        self.data[kind] = [e for e in self.data[kind] if e.id != entry_id]
        return len(self.data[kind]) < before

    async def list_entries(self, kind: CollectionKind) -> list[Entry]:
        self._check("list_entries", kind)
        return list(self.data[kind])

    async def update_entry(self, kind: CollectionKind, entry_id: str, patch: EntryPatch) -> Entry:
        self._check("update_entry", kind)
        for index, entry in enumerate(self.data[kind]):
            if entry.id == entry_id:
                updated = patch.apply_to(entry)
                self.data[kind][index] = updated
                return updated
        raise NotFoundError(f"Entry {entry_id} not found")

    async def replace_entries(self, kind: CollectionKind, entries: list[Entry]) -> None:
        self._check("replace_entries", kind)
        self.data[kind] = list(entries)


class RecordingDisplay:
    """ListDisplay that remembers every render."""

    def __init__(self):
        self.renders: list[tuple[CollectionKind, list[Entry]]] = []

    def render(self, kind: CollectionKind, entries: list[Entry]) -> None:
        self.renders.append((kind, list(entries)))

    @property
    def last(self) -> Optional[tuple[CollectionKind, list[Entry]]]:
        return self.renders[-1] if self.renders else None


def make_entry(
    kind: CollectionKind = CollectionKind.FINANCE,
    description: str = "Coffee",
    worth_it: bool = True,
    cost: Optional[str] = "4.50",
    **kwargs,
) -> Entry:
    if kind is CollectionKind.MEDIA:
        cost = None
    return Entry(
        kind=kind,
        description=description,
        worth_it=worth_it,
        cost=cost,
        **kwargs,
    )


@pytest.fixture
def swipe_settings() -> SwipeSettings:
    return SwipeSettings(
        threshold_px=100,
        time_limit_ms=1000,
        arm_ratio=0.6,
        animation_delay_ms=300,
    )


@pytest.fixture
def memory_storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture
def local_storage(tmp_path) -> LocalJsonStorage:
    return LocalJsonStorage(settings=StorageSettings(data_dir=str(tmp_path)))


@pytest.fixture
def audit_logger() -> AuditLogger:
    return AuditLogger()


@pytest.fixture
def display() -> RecordingDisplay:
    return RecordingDisplay()
