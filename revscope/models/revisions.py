"""Revision data structures and enumerations."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Generic, TypeVar

EntityId = int | str
ActorId = int

T = TypeVar("T")


class ChangeKind(StrEnum):
    """Kind of change recorded by a revision."""

    ADDED = "added"
    MODIFIED = "modified"
    DELETED = "deleted"
    UNKNOWN = "unknown"


class SortOrder(StrEnum):
    """Ordering of revisions by time."""

    ASC = "asc"
    DESC = "desc"


class IdentifierKind(StrEnum):
    """Shape of the entity identifier a record type is keyed by."""

    NUMERIC = "numeric"
    NATURAL_KEY = "natural_key"


@dataclass(frozen=True)
class RecordTypeDescriptor:
    """A version-tracked record type known to the registry."""

    type_id: str
    concrete: bool = True
    id_kind: IdentifierKind = IdentifierKind.NUMERIC

    @property
    def simple_name(self) -> str:
        """Last dotted segment of the type id (``clinic.Patient`` -> ``Patient``)."""
        return self.type_id.rsplit(".", 1)[-1]


@dataclass(frozen=True)
class RevisionRecord:
    """One recorded historical change of a single record instance.

    Owned by the versioned store; never mutated after creation.
    """

    type_id: str
    entity_id: str
    revision_id: int
    timestamp: datetime
    actor_id: ActorId | None = None
    change_kind: ChangeKind = ChangeKind.UNKNOWN


@dataclass(frozen=True)
class RevisionFilters:
    """Optional filters shared by list and count operations.

    Both time bounds are inclusive.
    """

    actor_id: ActorId | None = None
    from_time: datetime | None = None
    to_time: datetime | None = None

    @property
    def is_empty(self) -> bool:
        return self.actor_id is None and self.from_time is None and self.to_time is None

    def matches(self, record: RevisionRecord) -> bool:
        """Return True if *record* satisfies every filter that is set."""
        if self.actor_id is not None and record.actor_id != self.actor_id:
            return False
        if self.from_time is not None and record.timestamp < self.from_time:
            return False
        if self.to_time is not None and record.timestamp > self.to_time:
            return False
        return True


@dataclass(frozen=True)
class FieldDiff:
    """Difference of one field between two snapshots of the same record."""

    field_name: str
    old_value: str | None
    new_value: str | None
    changed: bool


@dataclass
class Page(Generic[T]):
    """One page of results plus a best-effort total across all sources.

    ``total_count`` comes from a separate count query and is not guaranteed
    to be consistent with ``items``.  ``skipped_types`` lists the type ids
    whose queries failed and contributed nothing.
    """

    items: list[T] = field(default_factory=list)
    total_count: int = 0
    skipped_types: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class RevisionDetail:
    """A single revision with its field-level changes, ready for display."""

    record: RevisionRecord
    diffs: list[FieldDiff]
    change_kind: ChangeKind
    change_description: str
    actor_name: str
