"""In-process versioned store.

Keeps the full revision history of every type in memory.  Used to embed
RevScope next to an application that records its own history, and as the
store double in tests.  Availability of individual types can be degraded
on purpose to exercise the per-type failure paths.
"""

from __future__ import annotations

from collections import defaultdict
from datetime import UTC, datetime
from typing import Any

from revscope.errors import SchemaUnavailableError, TransientStoreError
from revscope.models.revisions import (
    ActorId,
    ChangeKind,
    EntityId,
    RevisionFilters,
    RevisionRecord,
    SortOrder,
)
from revscope.observability.logging import get_logger
from revscope.store.base import StoredRevision, VersionedStoreClient

_log = get_logger("store.memory")


class InMemoryVersionedStore(VersionedStoreClient):
    """Revision history held in dictionaries keyed by type and entity."""

    def __init__(self) -> None:
        # type_id -> entity_id -> revisions in revision order
        self._history: dict[str, dict[str, list[StoredRevision]]] = defaultdict(dict)
        self._unprovisioned: set[str] = set()
        self._broken: dict[str, str] = {}

    # ------------------------------------------------------------------
    # Recording
    # ------------------------------------------------------------------

    def record(
        self,
        type_id: str,
        entity_id: EntityId,
        snapshot: Any,
        *,
        timestamp: datetime | None = None,
        actor_id: ActorId | None = None,
        change_kind: ChangeKind | None = None,
    ) -> RevisionRecord:
        """Append a revision for one entity and return its record.

        The revision id is one past the entity's latest revision, so the
        first revision of every entity is 1.  When *change_kind* is omitted
        it is ADDED for the first revision, DELETED for a None snapshot and
        MODIFIED otherwise.
        """
        key = str(entity_id)
        revisions = self._history[type_id].setdefault(key, [])
        revision_id = len(revisions) + 1
        if change_kind is None:
            if revision_id == 1:
                change_kind = ChangeKind.ADDED
            elif snapshot is None:
                change_kind = ChangeKind.DELETED
            else:
                change_kind = ChangeKind.MODIFIED

        record = RevisionRecord(
            type_id=type_id,
            entity_id=key,
            revision_id=revision_id,
            timestamp=timestamp or datetime.now(tz=UTC),
            actor_id=actor_id,
            change_kind=change_kind,
        )
        revisions.append(StoredRevision(record=record, snapshot=snapshot))
        return record

    # ------------------------------------------------------------------
    # Availability controls
    # ------------------------------------------------------------------

    def mark_unprovisioned(self, type_id: str) -> None:
        """Make every call for *type_id* raise SchemaUnavailableError."""
        self._unprovisioned.add(type_id)

    def mark_broken(self, type_id: str, message: str = "query failed") -> None:
        """Make every call for *type_id* raise TransientStoreError."""
        self._broken[type_id] = message

    def restore(self, type_id: str) -> None:
        """Undo mark_unprovisioned / mark_broken for *type_id*."""
        self._unprovisioned.discard(type_id)
        self._broken.pop(type_id, None)

    def _check_available(self, type_id: str) -> None:
        if type_id in self._unprovisioned:
            raise SchemaUnavailableError(type_id, "revision storage is not provisioned")
        message = self._broken.get(type_id)
        if message is not None:
            raise TransientStoreError(type_id, message)

    # ------------------------------------------------------------------
    # VersionedStoreClient
    # ------------------------------------------------------------------

    async def get_revisions(
        self,
        type_id: str,
        page: int,
        size: int,
        filters: RevisionFilters,
        sort_order: SortOrder = SortOrder.DESC,
    ) -> list[StoredRevision]:
        self._check_available(type_id)
        if page < 0 or size < 0:
            raise TransientStoreError(type_id, f"malformed page request: page={page} size={size}")

        matching = [
            stored
            for revisions in self._history.get(type_id, {}).values()
            for stored in revisions
            if filters.matches(stored.record)
        ]
        matching.sort(key=lambda s: s.record.entity_id)
        matching.sort(
            key=lambda s: (s.record.timestamp, s.record.revision_id),
            reverse=sort_order is SortOrder.DESC,
        )
        start = page * size
        return matching[start : start + size]

    async def count_revisions(self, type_id: str, filters: RevisionFilters) -> int:
        self._check_available(type_id)
        return sum(
            1
            for revisions in self._history.get(type_id, {}).values()
            for stored in revisions
            if filters.matches(stored.record)
        )

    async def get_snapshot_at(self, type_id: str, entity_id: EntityId, revision_id: int) -> Any | None:
        stored = await self.get_revision_detail(type_id, entity_id, revision_id)
        return stored.snapshot if stored is not None else None

    async def get_revision_detail(
        self,
        type_id: str,
        entity_id: EntityId,
        revision_id: int,
    ) -> StoredRevision | None:
        self._check_available(type_id)
        revisions = self._history.get(type_id, {}).get(str(entity_id))
        if not revisions or not 1 <= revision_id <= len(revisions):
            _log.debug(
                "revision_not_found",
                type_id=type_id,
                entity_id=str(entity_id),
                revision_id=revision_id,
            )
            return None
        return revisions[revision_id - 1]
