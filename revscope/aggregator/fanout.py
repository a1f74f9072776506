"""Cross-type revision aggregation.

The versioned store cannot join across record types, so a global,
time-ordered page is built by querying every candidate type for all of
its matching revisions (up to a safety cap), merging the per-type lists
in memory and slicing the requested page out of the merged sequence.
This costs a full per-type scan for every page; a timestamp index shared
by all types would avoid it but is not something the store offers.

Per-type calls run concurrently, bounded by a semaphore and a per-call
timeout.  Each call ends in an explicit SourceOutcome: only OK outcomes
contribute, every other outcome is logged and counts as zero.  Cancelling
the caller cancels every in-flight per-type call.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Generic, TypeVar

from revscope.errors import SchemaUnavailableError
from revscope.models.revisions import RecordTypeDescriptor, RevisionFilters, RevisionRecord, SortOrder
from revscope.observability.logging import get_logger
from revscope.observability.metrics import aggregation_duration_seconds, source_queries_total
from revscope.registry.type_registry import TypeRegistry
from revscope.store.base import VersionedStoreClient

_log = get_logger("aggregator")

_T = TypeVar("_T")


class SourceStatus(StrEnum):
    """Outcome of one per-type store call."""

    OK = "ok"
    SCHEMA_UNAVAILABLE = "schema_unavailable"
    TRANSIENT_ERROR = "transient_error"
    TIMEOUT = "timeout"


@dataclass(frozen=True)
class SourceOutcome(Generic[_T]):
    """Result of one per-type store call.  ``value`` is set only when OK."""

    type_id: str
    status: SourceStatus
    value: _T | None = None
    error: str = ""

    @property
    def ok(self) -> bool:
        return self.status is SourceStatus.OK


@dataclass
class AggregatedRevisions:
    """One page of merged revisions and the types that contributed nothing."""

    items: list[RevisionRecord] = field(default_factory=list)
    skipped_types: list[str] = field(default_factory=list)


@dataclass
class AggregatedCount:
    """Summed revision count and the types that contributed nothing."""

    total: int = 0
    skipped_types: list[str] = field(default_factory=list)


def order_revisions(records: Iterable[RevisionRecord], sort_order: SortOrder) -> list[RevisionRecord]:
    """Sort *records* globally by timestamp, then revision id.

    DESC reverses the timestamp / revision id comparison only; remaining
    ties are always broken by ascending type id, then entity id.
    """
    ordered = sorted(records, key=lambda r: (r.type_id, r.entity_id))
    # list.sort is stable with reverse=True, so the tie-break order survives
    ordered.sort(key=lambda r: (r.timestamp, r.revision_id), reverse=sort_order is SortOrder.DESC)
    return ordered


def slice_page(items: list[_T], page: int, size: int) -> list[_T]:
    """Return ``items[page * size : page * size + size]``; out of range is empty."""
    start = page * size
    return items[start : start + size]


class RevisionAggregator:
    """Fans revision queries out over record types and merges the results.

    Args:
        registry:        Source of the candidate record types.
        store:           Versioned store queried once per type.
        concurrency:     Maximum number of per-type calls in flight.
        timeout_seconds: Per-call timeout; expiry counts as a failed type.
        safety_cap:      Maximum revisions fetched per type for cross-type pages.
    """

    def __init__(
        self,
        registry: TypeRegistry,
        store: VersionedStoreClient,
        *,
        concurrency: int = 8,
        timeout_seconds: float = 10.0,
        safety_cap: int = 10_000,
    ) -> None:
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        if safety_cap < 1:
            raise ValueError("safety_cap must be at least 1")
        self._registry = registry
        self._store = store
        self._concurrency = concurrency
        self._timeout = timeout_seconds
        self._safety_cap = safety_cap

    # ------------------------------------------------------------------
    # Single type
    # ------------------------------------------------------------------

    async def list_revisions(
        self,
        type_id: str,
        page: int,
        size: int,
        filters: RevisionFilters,
        sort_order: SortOrder = SortOrder.DESC,
    ) -> AggregatedRevisions:
        """Return one page of revisions of a single type, paginated by the store."""
        _check_page(page, size)
        descriptor = self._registry.resolve(type_id)
        if descriptor is None:
            return AggregatedRevisions()

        outcomes = await self._fan_out(
            "list",
            [descriptor],
            lambda t: self._store.get_revisions(t, page, size, filters, sort_order),
        )
        outcome = outcomes[0]
        if not outcome.ok or outcome.value is None:
            return AggregatedRevisions(skipped_types=[outcome.type_id])
        return AggregatedRevisions(items=[stored.record for stored in outcome.value][:size])

    async def count_revisions(self, type_id: str, filters: RevisionFilters) -> AggregatedCount:
        """Return the number of revisions of a single type matching *filters*."""
        descriptor = self._registry.resolve(type_id)
        if descriptor is None:
            return AggregatedCount()
        return await self._count([descriptor], filters)

    # ------------------------------------------------------------------
    # Across types
    # ------------------------------------------------------------------

    async def list_all_revisions(
        self,
        page: int,
        size: int,
        filters: RevisionFilters,
        sort_order: SortOrder = SortOrder.DESC,
        type_filter: str | None = None,
    ) -> AggregatedRevisions:
        """Return one globally ordered page of revisions across record types.

        Every candidate type is fetched from offset 0 up to the safety cap,
        then all surviving lists are merged and the page is sliced out.
        """
        _check_page(page, size)
        candidates = self._candidates(type_filter)
        if not candidates:
            return AggregatedRevisions()

        started = time.monotonic()
        outcomes = await self._fan_out(
            "list_all",
            candidates,
            lambda t: self._store.get_revisions(t, 0, self._safety_cap, filters, sort_order),
        )

        merged: list[RevisionRecord] = []
        skipped: list[str] = []
        for outcome in outcomes:
            if not outcome.ok or outcome.value is None:
                skipped.append(outcome.type_id)
                continue
            if len(outcome.value) >= self._safety_cap:
                _log.warning("type_results_truncated", type_id=outcome.type_id, cap=self._safety_cap)
            merged.extend(stored.record for stored in outcome.value[: self._safety_cap])

        items = slice_page(order_revisions(merged, sort_order), page, size)
        elapsed = time.monotonic() - started
        aggregation_duration_seconds.labels(operation="list_all").observe(elapsed)
        _log.debug(
            "aggregation_complete",
            operation="list_all",
            types=len(candidates),
            skipped=len(skipped),
            merged=len(merged),
            returned=len(items),
            duration_ms=round(elapsed * 1000, 2),
        )
        return AggregatedRevisions(items=items, skipped_types=skipped)

    async def count_all_revisions(
        self,
        filters: RevisionFilters,
        type_filter: str | None = None,
    ) -> AggregatedCount:
        """Sum per-type revision counts; failed types count as zero."""
        candidates = self._candidates(type_filter)
        if not candidates:
            return AggregatedCount()
        started = time.monotonic()
        result = await self._count(candidates, filters)
        aggregation_duration_seconds.labels(operation="count_all").observe(time.monotonic() - started)
        return result

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _candidates(self, type_filter: str | None) -> list[RecordTypeDescriptor]:
        if type_filter is None or not type_filter.strip():
            return list(self._registry.list_concrete_versioned_types())
        descriptor = self._registry.resolve(type_filter)
        return [descriptor] if descriptor is not None else []

    async def _count(self, candidates: list[RecordTypeDescriptor], filters: RevisionFilters) -> AggregatedCount:
        outcomes = await self._fan_out(
            "count",
            candidates,
            lambda t: self._store.count_revisions(t, filters),
        )
        total = 0
        skipped: list[str] = []
        for outcome in outcomes:
            if outcome.ok and outcome.value is not None:
                total += outcome.value
            else:
                skipped.append(outcome.type_id)
        return AggregatedCount(total=total, skipped_types=skipped)

    async def _fan_out(
        self,
        operation: str,
        candidates: list[RecordTypeDescriptor],
        call: Callable[[str], Awaitable[_T]],
    ) -> list[SourceOutcome[_T]]:
        """Run *call* once per candidate type and wait for every outcome.

        The returned list is in candidate order.  Cancellation of the
        caller propagates to every pending call through gather.
        """
        semaphore = asyncio.Semaphore(self._concurrency)

        async def _one(type_id: str) -> SourceOutcome[_T]:
            async with semaphore:
                outcome = await self._query_one(operation, type_id, call)
            source_queries_total.labels(operation=operation, status=outcome.status.value).inc()
            return outcome

        return list(await asyncio.gather(*(_one(d.type_id) for d in candidates)))

    async def _query_one(
        self,
        operation: str,
        type_id: str,
        call: Callable[[str], Awaitable[_T]],
    ) -> SourceOutcome[_T]:
        try:
            value = await asyncio.wait_for(call(type_id), timeout=self._timeout)
        except SchemaUnavailableError as exc:
            _log.warning("type_schema_unavailable", operation=operation, type_id=type_id, error=str(exc))
            return SourceOutcome(type_id, SourceStatus.SCHEMA_UNAVAILABLE, error=str(exc))
        except TimeoutError:
            _log.error("type_query_timeout", operation=operation, type_id=type_id, timeout=self._timeout)
            return SourceOutcome(type_id, SourceStatus.TIMEOUT, error=f"timed out after {self._timeout}s")
        except Exception as exc:  # noqa: BLE001
            _log.error("type_query_failed", operation=operation, type_id=type_id, error=str(exc))
            return SourceOutcome(type_id, SourceStatus.TRANSIENT_ERROR, error=str(exc))
        return SourceOutcome(type_id, SourceStatus.OK, value=value)


def _check_page(page: int, size: int) -> None:
    if page < 0:
        raise ValueError(f"page must not be negative, got {page}")
    if size < 1:
        raise ValueError(f"size must be positive, got {size}")
