"""RevisionService: the facade consumed by presentation code.

Composes the type registry, the cross-type aggregator, the field diff
engine and the identity resolver.  Everything except unsupported entity
identifiers and a failed type scan degrades into partial or empty
results instead of raising.

Usage::

    from revscope.service import build_revision_service

    service = build_revision_service(catalog=catalog, store=store)
    page = await service.list_all_revisions(page=0, size=20)
"""

from __future__ import annotations

import asyncio
from typing import Any

from revscope.aggregator.fanout import RevisionAggregator
from revscope.config import load_config
from revscope.diff.engine import FieldDiffEngine, classify_change, describe_change_kind
from revscope.errors import StoreError
from revscope.identity.http_directory import HttpIdentityDirectory
from revscope.identity.memory_directory import InMemoryIdentityDirectory
from revscope.identity.resolver import IdentityDirectory, IdentityResolver
from revscope.models.config import PagingConfig, RevScopeConfig
from revscope.models.revisions import (
    ActorId,
    ChangeKind,
    Page,
    RecordTypeDescriptor,
    RevisionDetail,
    RevisionFilters,
    RevisionRecord,
    SortOrder,
)
from revscope.observability.logging import get_logger, setup_logging
from revscope.registry.catalog import TypeCatalog
from revscope.registry.type_registry import TypeRegistry
from revscope.store.base import StoredRevision, VersionedStoreClient
from revscope.store.identifiers import route_entity_id

_log = get_logger("service")

_NO_FILTERS = RevisionFilters()


class RevisionService:
    """Read-only revision history operations across all versioned types."""

    def __init__(
        self,
        registry: TypeRegistry,
        store: VersionedStoreClient,
        aggregator: RevisionAggregator,
        diff_engine: FieldDiffEngine,
        resolver: IdentityResolver,
        paging: PagingConfig | None = None,
        directory: IdentityDirectory | None = None,
    ) -> None:
        self._registry = registry
        self._store = store
        self._aggregator = aggregator
        self._diff_engine = diff_engine
        self._resolver = resolver
        self._paging = paging or PagingConfig()
        self._directory = directory

    # ------------------------------------------------------------------
    # Types
    # ------------------------------------------------------------------

    def list_versioned_types(self) -> tuple[RecordTypeDescriptor, ...]:
        return self._registry.list_concrete_versioned_types()

    # ------------------------------------------------------------------
    # Revision listings
    # ------------------------------------------------------------------

    async def list_revisions(
        self,
        type_id: str,
        page: int = 0,
        size: int | None = None,
        filters: RevisionFilters | None = None,
        sort_order: SortOrder = SortOrder.DESC,
    ) -> Page[RevisionRecord]:
        """Return one page of a single type's revisions plus its total count."""
        page, size = self.normalize_page(page, size)
        filters = filters or _NO_FILTERS
        listed, counted = await asyncio.gather(
            self._aggregator.list_revisions(type_id, page, size, filters, sort_order),
            self._aggregator.count_revisions(type_id, filters),
        )
        return Page(
            items=listed.items,
            total_count=counted.total,
            skipped_types=_merge_skipped(listed.skipped_types, counted.skipped_types),
        )

    async def count_revisions(self, type_id: str, filters: RevisionFilters | None = None) -> int:
        counted = await self._aggregator.count_revisions(type_id, filters or _NO_FILTERS)
        return counted.total

    async def list_all_revisions(
        self,
        page: int = 0,
        size: int | None = None,
        filters: RevisionFilters | None = None,
        sort_order: SortOrder = SortOrder.DESC,
        type_filter: str | None = None,
    ) -> Page[RevisionRecord]:
        """Return one globally ordered page across all versioned types.

        Items and ``total_count`` come from two independent fan-outs against
        a live store and may disagree; treat the count as a pagination hint.
        """
        page, size = self.normalize_page(page, size)
        filters = filters or _NO_FILTERS
        listed, counted = await asyncio.gather(
            self._aggregator.list_all_revisions(page, size, filters, sort_order, type_filter),
            self._aggregator.count_all_revisions(filters, type_filter),
        )
        return Page(
            items=listed.items,
            total_count=counted.total,
            skipped_types=_merge_skipped(listed.skipped_types, counted.skipped_types),
        )

    async def count_all_revisions(
        self,
        filters: RevisionFilters | None = None,
        type_filter: str | None = None,
    ) -> int:
        counted = await self._aggregator.count_all_revisions(filters or _NO_FILTERS, type_filter)
        return counted.total

    # ------------------------------------------------------------------
    # Revision detail
    # ------------------------------------------------------------------

    async def get_revision_detail(
        self,
        type_id: str,
        entity_id: object,
        revision_id: int,
    ) -> RevisionDetail | None:
        """Return one revision with its field diffs against the previous revision.

        Unknown types, missing revisions and store failures return None,
        including a failed read of the previous revision.

        Raises:
            UnsupportedIdentifierTypeError: if *entity_id* cannot be routed for the type.
        """
        descriptor = self._registry.resolve(type_id)
        if descriptor is None:
            return None
        key = route_entity_id(descriptor, entity_id)
        if revision_id < 1:
            return None

        current = await self._lookup_detail(descriptor.type_id, key, revision_id)
        if current is None:
            return None

        previous: Any | None = None
        if revision_id > 1:
            try:
                previous = await self._store.get_snapshot_at(descriptor.type_id, key, revision_id - 1)
            except StoreError as exc:
                _log.warning(
                    "previous_snapshot_unavailable",
                    type_id=descriptor.type_id,
                    entity_id=str(key),
                    revision_id=revision_id - 1,
                    error=str(exc),
                )
                return None

        diffs = self._diff_engine.diff(descriptor.type_id, previous, current.snapshot)
        kind = current.record.change_kind
        if kind is ChangeKind.UNKNOWN:
            kind = classify_change(previous, current.snapshot)
        actor_name = await self._resolver.resolve_display_name(current.record.actor_id)

        return RevisionDetail(
            record=current.record,
            diffs=diffs,
            change_kind=kind,
            change_description=describe_change_kind(kind),
            actor_name=actor_name,
        )

    async def _lookup_detail(self, type_id: str, key: Any, revision_id: int) -> StoredRevision | None:
        try:
            return await self._store.get_revision_detail(type_id, key, revision_id)
        except StoreError as exc:
            _log.warning(
                "revision_detail_unavailable",
                type_id=type_id,
                entity_id=str(key),
                revision_id=revision_id,
                error=str(exc),
            )
            return None

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------

    async def resolve_display_name(self, actor_id: ActorId | None) -> str:
        return await self._resolver.resolve_display_name(actor_id)

    async def resolve_actor_id(self, text: str | None) -> ActorId | None:
        return await self._resolver.resolve_actor_id(text)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def normalize_page(self, page: int, size: int | None) -> tuple[int, int]:
        """Clamp paging input: negative page -> 0, missing or non-positive size -> default."""
        if page < 0:
            page = 0
        if size is None or size <= 0:
            size = self._paging.default_size
        return page, min(size, self._paging.max_size)

    async def stop(self) -> None:
        """Release collaborator resources (HTTP connections)."""
        stop_fn = getattr(self._directory, "stop", None)
        if stop_fn is not None:
            await stop_fn()


def _merge_skipped(*groups: list[str]) -> list[str]:
    return sorted({type_id for group in groups for type_id in group})


def build_revision_service(
    catalog: TypeCatalog,
    store: VersionedStoreClient,
    directory: IdentityDirectory | None = None,
    config: RevScopeConfig | None = None,
) -> RevisionService:
    """Wire a RevisionService from configuration.

    Without an explicit *directory*, an HttpIdentityDirectory is used when
    ``config.identity.endpoint`` is set, otherwise an empty in-memory
    directory (every actor resolves to "Unknown").
    """
    config = config or RevScopeConfig()
    if directory is None:
        if config.identity.endpoint:
            directory = HttpIdentityDirectory(
                endpoint=config.identity.endpoint,
                timeout=config.identity.timeout_seconds,
            )
        else:
            directory = InMemoryIdentityDirectory()

    registry = TypeRegistry(catalog)
    aggregator = RevisionAggregator(
        registry,
        store,
        concurrency=config.aggregation.concurrency,
        timeout_seconds=config.aggregation.timeout_seconds,
        safety_cap=config.aggregation.safety_cap,
    )
    _log.info(
        "revision_service_built",
        concurrency=config.aggregation.concurrency,
        timeout=config.aggregation.timeout_seconds,
        safety_cap=config.aggregation.safety_cap,
        identity=type(directory).__name__,
    )
    return RevisionService(
        registry=registry,
        store=store,
        aggregator=aggregator,
        diff_engine=FieldDiffEngine(catalog),
        resolver=IdentityResolver(directory),
        paging=config.paging,
        directory=directory,
    )


def build_revision_service_from_env(
    catalog: TypeCatalog,
    store: VersionedStoreClient,
    directory: IdentityDirectory | None = None,
) -> RevisionService:
    """Load REVSCOPE_* configuration, configure logging and wire the service."""
    config = load_config()
    setup_logging(config.log.level, config.log.format)
    return build_revision_service(catalog, store, directory=directory, config=config)
