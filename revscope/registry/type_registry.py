"""Discovery and caching of concrete version-tracked record types.

The first call to ``list_concrete_versioned_types`` scans the type-metadata
source, drops abstract types, sorts by type id and stores the result.
Later calls return the stored tuple.  The cache has no mutation API and
lives as long as the registry (normally the process).
"""

from __future__ import annotations

import threading
from collections.abc import Iterable
from typing import Protocol

from revscope.errors import TypeScanError
from revscope.models.revisions import RecordTypeDescriptor
from revscope.observability.logging import get_logger

_log = get_logger("registry")


class TypeMetadataSource(Protocol):
    """Anything that can enumerate versioned type descriptors."""

    def scan(self) -> Iterable[RecordTypeDescriptor]: ...


class TypeRegistry:
    """Compute-once registry of concrete versioned types.

    Concurrent first callers block on a single in-flight scan; the cache
    slot is assigned only once the complete, sorted tuple exists, so a
    reader never observes a partially populated result.  A failed scan is
    not cached and the next call scans again.
    """

    def __init__(self, source: TypeMetadataSource) -> None:
        self._source = source
        self._lock = threading.Lock()
        self._types: tuple[RecordTypeDescriptor, ...] | None = None
        self._by_id: dict[str, RecordTypeDescriptor] = {}

    def list_concrete_versioned_types(self) -> tuple[RecordTypeDescriptor, ...]:
        """Return every concrete versioned type, sorted by type id.

        Raises:
            TypeScanError: if the metadata source cannot be scanned.
        """
        types = self._types
        if types is not None:
            return types
        with self._lock:
            if self._types is None:
                return self._load()
            return self._types

    def resolve(self, name: str | None) -> RecordTypeDescriptor | None:
        """Map a caller-supplied type name onto a known concrete type.

        Exact type ids win; otherwise a simple name (last dotted segment)
        resolves when exactly one concrete type carries it.  Unknown,
        ambiguous or abstract names return None.
        """
        if not name or not name.strip():
            return None
        name = name.strip()
        self.list_concrete_versioned_types()
        exact = self._by_id.get(name)
        if exact is not None:
            return exact
        candidates = [d for d in self._by_id.values() if d.simple_name == name]
        if len(candidates) == 1:
            return candidates[0]
        _log.info("type_name_unresolved", name=name, candidates=len(candidates))
        return None

    def _load(self) -> tuple[RecordTypeDescriptor, ...]:
        try:
            scanned = list(self._source.scan())
        except TypeScanError:
            raise
        except Exception as exc:
            _log.error("type_scan_failed", error=str(exc))
            raise TypeScanError(f"versioned type scan failed: {exc}") from exc

        concrete = sorted((d for d in scanned if d.concrete), key=lambda d: d.type_id)
        by_id: dict[str, RecordTypeDescriptor] = {}
        for descriptor in concrete:
            if descriptor.type_id in by_id:
                raise TypeScanError(f"duplicate versioned type id: {descriptor.type_id}")
            by_id[descriptor.type_id] = descriptor

        self._by_id = by_id
        self._types = tuple(concrete)
        _log.info(
            "versioned_types_discovered",
            concrete=len(concrete),
            skipped_abstract=len(scanned) - len(concrete),
        )
        return self._types
