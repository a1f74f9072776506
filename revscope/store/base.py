"""Versioned store contract consumed by RevScope.

RevScope never writes to the store and does not own its format.  An
adapter implements ``VersionedStoreClient`` for a concrete engine; every
method may raise ``SchemaUnavailableError`` or ``TransientStoreError``.
NotFound on point lookups is signalled by returning ``None``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from revscope.models.revisions import EntityId, RevisionFilters, RevisionRecord, SortOrder


@dataclass(frozen=True)
class StoredRevision:
    """A revision record together with the snapshot taken at that revision.

    ``snapshot`` is None when the store keeps no state for the revision
    (typically a deletion).
    """

    record: RevisionRecord
    snapshot: Any


class VersionedStoreClient(ABC):
    """Per-type revision queries against a versioned store."""

    @abstractmethod
    async def get_revisions(
        self,
        type_id: str,
        page: int,
        size: int,
        filters: RevisionFilters,
        sort_order: SortOrder = SortOrder.DESC,
    ) -> list[StoredRevision]:
        """Return one page of revisions of *type_id* ordered by time.

        Ordering is by timestamp then revision id in *sort_order*.  The page
        covers ``[page * size, page * size + size)``.
        """

    @abstractmethod
    async def count_revisions(self, type_id: str, filters: RevisionFilters) -> int:
        """Return the number of revisions of *type_id* matching *filters*."""

    @abstractmethod
    async def get_snapshot_at(self, type_id: str, entity_id: EntityId, revision_id: int) -> Any | None:
        """Return the snapshot of one entity at one revision, or None."""

    @abstractmethod
    async def get_revision_detail(
        self,
        type_id: str,
        entity_id: EntityId,
        revision_id: int,
    ) -> StoredRevision | None:
        """Return record and snapshot of one entity at one revision, or None."""
