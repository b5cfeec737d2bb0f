"""
JSON document helpers shared by the JSON-file backends (local, GitHub).

A collection is stored as a plain JSON array of camelCase entry objects.

Items that don't parse as entries (hand edits, records from older
versions) are kept as raw documents and written back unchanged, so a
read-modify-write never drops data this version can't read.
"""

from typing import Any, Iterable

import structlog
from pydantic import BaseModel, Field, ValidationError

from worthit.models.entry import CollectionKind, Entry

logger = structlog.get_logger(__name__)


class DecodedCollection(BaseModel):
    """A collection file split into parsed entries and untouched raw items."""

    entries: list[Entry] = Field(default_factory=list)
    unparsed: list[Any] = Field(default_factory=list)


def decode_collection(kind: CollectionKind, documents: Any) -> DecodedCollection:
    """
    Parse a decoded JSON array into entries, keeping malformed items aside.

    Items without a type are assumed to be `kind`.

    Raises:
        ValueError: the document is not a JSON array
    """
    if not isinstance(documents, list):
        raise ValueError("collection is not a JSON array")

    decoded = DecodedCollection()
    for item in documents:
        if not isinstance(item, dict):
            decoded.unparsed.append(item)
            continue
        document = item
        if "type" not in item and "kind" not in item:
            document = {**item, "type": kind.value}
        try:
            decoded.entries.append(Entry.model_validate(document))
        except ValidationError as e:
            logger.warning(
                "keeping_malformed_entry",
                collection=kind.value,
                entry_id=item.get("id"),
                error=str(e),
            )
            decoded.unparsed.append(item)
    return decoded


def encode_collection(entries: Iterable[Entry], unparsed: Iterable[Any] = ()) -> list:
    """Encode entries for a JSON array, followed by the raw items kept on read."""
    return entries_to_documents(entries) + list(unparsed)


def entries_from_documents(kind: CollectionKind, documents: Any) -> list[Entry]:
    """
    Parse a decoded JSON array into entries.

    Lenient reader for responses that are never written back: a non-array
    reads as empty and malformed items are dropped.
    """
    if not isinstance(documents, list):
        logger.warning("collection_not_a_list", collection=kind.value)
        return []
    return decode_collection(kind, documents).entries


def entries_to_documents(entries: Iterable[Entry]) -> list[dict]:
    """Encode entries for a JSON array."""
    return [entry.to_wire() for entry in entries]
