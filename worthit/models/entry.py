"""
Core Data Models for Worth-It Tracker

These models define the schemas for every entry that flows through
the system, whatever backend ends up storing it. They are designed to:
1. Validate form input before it reaches storage
2. Read and write the camelCase JSON shared by all JSON backends
3. Keep the finance/media difference in one place

DESIGN DECISION: One Entry model with a kind discriminator.
Finance and media entries only differ by the cost field, so a second
model would duplicate everything else.
"""

import secrets
import string
import time
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional, Union

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
    model_validator,
)


_BASE36 = string.digits + string.ascii_lowercase


def _to_base36(number: int) -> str:
    if number == 0:
        return "0"
    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(_BASE36[remainder])
    return "".join(reversed(digits))


def generate_entry_id() -> str:
    """
    Generate a unique, roughly time-ordered entry ID.

    Millisecond timestamp in base36 followed by random base36 characters,
    the same shape as the IDs already present in existing data files.
    """
    millis = int(time.time() * 1000)
    suffix = "".join(secrets.choice(_BASE36) for _ in range(10))
    return _to_base36(millis) + suffix


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# ENUMS
# =============================================================================

class CollectionKind(str, Enum):
    """
    Which logical set of entries an operation applies to.
    """
    FINANCE = "finance"
    MEDIA = "media"

    @property
    def collection_name(self) -> str:
        """Plural name used for files, sheets and REST paths."""
        return "finances" if self is CollectionKind.FINANCE else "media"

    @property
    def label(self) -> str:
        return "Finance" if self is CollectionKind.FINANCE else "Media"


# =============================================================================
# ENTRY MODELS
# =============================================================================

class Entry(BaseModel):
    """
    A stored log entry.

    Storage owns entries; anything the UI holds is a disposable copy.
    Serialize with model_dump(mode="json", by_alias=True) to get the
    wire format: {id, timestamp, type, description, worthIt, cost}.
    """
    model_config = ConfigDict(
        str_strip_whitespace=True,
        populate_by_name=True,
    )

    id: str = Field(
        default_factory=generate_entry_id,
        min_length=1,
        description="Unique entry ID"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the entry was created"
    )
    kind: CollectionKind = Field(
        ...,
        validation_alias=AliasChoices("type", "kind"),
        serialization_alias="type",
        description="Finance or media"
    )
    description: str = Field(
        ...,
        min_length=1,
        max_length=500,
        description="What was bought or watched"
    )
    worth_it: bool = Field(
        default=True,
        validation_alias=AliasChoices("worthIt", "worth_it"),
        serialization_alias="worthIt",
        description="Was it worth it?"
    )
    cost: Optional[Decimal] = Field(
        default=None,
        ge=0,
        validation_alias=AliasChoices("cost", "amount"),
        serialization_alias="cost",
        description="Cost of a finance entry"
    )

    @field_validator('timestamp', mode='after')
    @classmethod
    def assume_utc(cls, v: datetime) -> datetime:
        """Timestamps without a zone are read as UTC."""
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    @model_validator(mode='after')
    def validate_cost_for_kind(self) -> 'Entry':
        """Finance entries carry a cost, media entries never do."""
        if self.kind is CollectionKind.FINANCE and self.cost is None:
            raise ValueError("Finance entries need a cost")
        if self.kind is CollectionKind.MEDIA and self.cost is not None:
            raise ValueError("Media entries do not have a cost")
        return self

    @field_serializer("cost", when_used="json")
    def serialize_cost(self, cost: Optional[Decimal]) -> Optional[float]:
        return float(cost) if cost is not None else None

    def to_wire(self) -> dict:
        """JSON-ready dict in the shared camelCase format."""
        data = self.model_dump(mode="json", by_alias=True)
        if data.get("cost") is None:
            data.pop("cost", None)
        return data


class EntryCreate(BaseModel):
    """
    Data submitted from the entry form.

    Stricter than Entry: a new finance entry must cost something.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    description: str = Field(
        ...,
        min_length=1,
        max_length=500,
        description="What was bought or watched"
    )
    worth_it: bool = Field(
        default=True,
        description="Was it worth it?"
    )
    cost: Optional[Decimal] = Field(
        default=None,
        gt=0,
        description="Cost (finance only)"
    )


class EntryPatch(BaseModel):
    """Partial update of an entry. Unset fields are left alone."""
    model_config = ConfigDict(str_strip_whitespace=True)

    description: Optional[str] = Field(
        default=None,
        min_length=1,
        max_length=500,
    )
    worth_it: Optional[bool] = None
    cost: Optional[Decimal] = Field(default=None, ge=0)

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True, exclude_none=True)

    def apply_to(self, entry: Entry) -> Entry:
        """Return a new, re-validated entry with the patch applied."""
        data = entry.model_dump()
        data.update(self.changes())
        return Entry.model_validate(data)


def materialize_entry(
    kind: CollectionKind,
    data: Union[EntryCreate, Entry],
) -> Entry:
    """
    Turn form data into a stored entry (new ID and timestamp).

    An Entry is passed through untouched so every backend in a
    fallback chain stores the same ID.
    """
    if isinstance(data, Entry):
        if data.kind is not kind:
            raise ValueError(
                f"Entry {data.id} is a {data.kind.value} entry, not {kind.value}"
            )
        return data

    return Entry(
        kind=kind,
        description=data.description,
        worth_it=data.worth_it,
        cost=data.cost if kind is CollectionKind.FINANCE else None,
    )


# =============================================================================
# STATISTICS
# =============================================================================

class EntryStatistics(BaseModel):
    """Summary of a collection, split by the worth-it flag."""

    count: int = Field(default=0, ge=0)
    total: float = 0.0
    worth_it_total: float = 0.0
    not_worth_it_total: float = 0.0
    worth_it_count: int = Field(default=0, ge=0)
    not_worth_it_count: int = Field(default=0, ge=0)
    average_spend: float = 0.0
    worth_it_percentage: float = Field(default=0.0, ge=0.0, le=100.0)

    @classmethod
    def from_entries(cls, entries: list[Entry]) -> 'EntryStatistics':
        if not entries:
            return cls()

        stats = cls(count=len(entries))
        for entry in entries:
            amount = float(entry.cost) if entry.cost is not None else 0.0
            stats.total += amount
            if entry.worth_it:
                stats.worth_it_total += amount
                stats.worth_it_count += 1
            else:
                stats.not_worth_it_total += amount
                stats.not_worth_it_count += 1

        stats.average_spend = stats.total / stats.count
        stats.worth_it_percentage = stats.worth_it_count / stats.count * 100
        return stats
