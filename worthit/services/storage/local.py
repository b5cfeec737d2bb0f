"""
Local JSON Storage Implementation

DESIGN DECISION: The local store is the backend that is always there.
It is the default backend and the last link of every fallback chain,
so it needs no network, no credentials and no setup.

Each collection is one JSON file named after its storage key
(e.g. ~/.worthit/task_tracker_finances.json). Writes go through a
same-directory temp file and os.replace, so a crash mid-write never
leaves a half-written collection behind.
"""

import json
import os
import uuid
from pathlib import Path
from typing import Optional, Union

import structlog

from worthit.config import StorageSettings, get_settings
from worthit.models.entry import (
    CollectionKind,
    Entry,
    EntryCreate,
    EntryPatch,
    materialize_entry,
)
from worthit.services.storage.codec import (
    DecodedCollection,
    decode_collection,
    encode_collection,
)
from worthit.services.storage.interface import (
    EntryStorageInterface,
    NotFoundError,
    StorageError,
)

logger = structlog.get_logger(__name__)


def atomic_write_text(dst: Path, text: str) -> None:
    """
    Atomically write text to dst (same-dir temp + fsync + replace).
    """
    dst.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = dst.parent / f".{dst.name}.tmp-{os.getpid()}-{uuid.uuid4().hex[:8]}"

    try:
        with open(tmp_path, "w", encoding="utf-8") as f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, dst)
    except OSError:
        if tmp_path.exists():
            tmp_path.unlink()
        raise


class LocalJsonStorage(EntryStorageInterface):
    """
    Entry storage backed by JSON files in a local directory.
    """

    name = "local"

    def __init__(
        self,
        data_dir: Optional[Union[str, Path]] = None,
        settings: Optional[StorageSettings] = None,
    ):
        self._settings = settings or get_settings().storage
        self._data_dir = (
            Path(data_dir).expanduser() if data_dir else self._settings.data_path
        )

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def path_for(self, kind: CollectionKind) -> Path:
        key = (
            self._settings.finance_key
            if kind is CollectionKind.FINANCE
            else self._settings.media_key
        )
        return self._data_dir / f"{key}.json"

    def _read(self, kind: CollectionKind) -> DecodedCollection:
        path = self.path_for(kind)
        if not path.exists():
            return DecodedCollection()
        try:
            documents = json.loads(path.read_text(encoding="utf-8") or "[]")
            return decode_collection(kind, documents)
        except ValueError as e:
            # JSONDecodeError, UnicodeDecodeError and non-array documents
            raise StorageError(f"Local store {path.name} is corrupt: {e}")
        except OSError as e:
            raise StorageError(f"Failed to read {path}: {e}")

    def _write(
        self,
        kind: CollectionKind,
        entries: list[Entry],
        unparsed: Optional[list] = None,
    ) -> None:
        path = self.path_for(kind)
        try:
            atomic_write_text(
                path,
                json.dumps(
                    encode_collection(entries, unparsed or []),
                    indent=2,
                    ensure_ascii=False,
                ),
            )
        except OSError as e:
            raise StorageError(f"Failed to write {path}: {e}")

    async def add_entry(
        self,
        kind: CollectionKind,
        data: Union[EntryCreate, Entry],
    ) -> Entry:
        entry = materialize_entry(kind, data)
        stored = self._read(kind)
        # Re-adding the same ID (e.g. a mirrored write) replaces it
        entries = [e for e in stored.entries if e.id != entry.id]
        entries.append(entry)
        self._write(kind, entries, stored.unparsed)
        logger.debug("local_entry_added", collection=kind.value, entry_id=entry.id)
        return entry

    async def delete_entry(self, kind: CollectionKind, entry_id: str) -> bool:
        stored = self._read(kind)
        remaining = [e for e in stored.entries if e.id != entry_id]
        if len(remaining) == len(stored.entries):
            return False
        self._write(kind, remaining, stored.unparsed)
        return True

    async def list_entries(self, kind: CollectionKind) -> list[Entry]:
        return self._read(kind).entries

    async def update_entry(
        self,
        kind: CollectionKind,
        entry_id: str,
        patch: EntryPatch,
    ) -> Entry:
        stored = self._read(kind)
        entries = stored.entries
        for index, entry in enumerate(entries):
            if entry.id == entry_id:
                updated = patch.apply_to(entry)
                entries[index] = updated
                self._write(kind, entries, stored.unparsed)
                return updated
        raise NotFoundError(f"Entry not found: {entry_id}")

    async def replace_entries(
        self,
        kind: CollectionKind,
        entries: list[Entry],
    ) -> None:
        stored = self._read(kind)
        self._write(kind, list(entries), stored.unparsed)
