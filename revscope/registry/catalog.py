"""Static catalog of version-tracked record types.

Every versioned record type is registered once, together with a
FieldAccessor that enumerates its instance-level fields and reads them
from a snapshot.  The catalog is the type-metadata source scanned by
TypeRegistry; nothing here inspects modules or walks the import graph.

Usage::

    catalog = TypeCatalog()

    @catalog.versioned("clinic.Patient")
    @dataclass(frozen=True)
    class Patient:
        patient_id: int
        given_name: str
"""

from __future__ import annotations

import dataclasses
import inspect
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any, TypeVar

from revscope.models.revisions import IdentifierKind, RecordTypeDescriptor

_C = TypeVar("_C", bound=type)


class FieldAccessor(ABC):
    """Enumerates the fields of one record shape and reads them from snapshots."""

    @abstractmethod
    def field_names(self) -> tuple[str, ...]:
        """Instance-level field names in declaration order."""

    @abstractmethod
    def read(self, snapshot: Any, name: str) -> Any:
        """Return the value of *name* in *snapshot*.

        May raise any exception when the value cannot be produced (e.g. an
        unloaded reference); callers degrade such failures themselves.
        """


class DataclassFieldAccessor(FieldAccessor):
    """Accessor for dataclass snapshots.

    ``dataclasses.fields`` already leaves out ``ClassVar`` and ``InitVar``
    pseudo-fields.  Fields declared with ``metadata={"versioned": False}``
    are skipped as well.
    """

    def __init__(self, model: type) -> None:
        if not dataclasses.is_dataclass(model):
            raise TypeError(f"{model.__name__} is not a dataclass")
        self._names = tuple(
            f.name for f in dataclasses.fields(model) if f.metadata.get("versioned", True)
        )

    def field_names(self) -> tuple[str, ...]:
        return self._names

    def read(self, snapshot: Any, name: str) -> Any:
        return getattr(snapshot, name)


class MappingFieldAccessor(FieldAccessor):
    """Accessor for snapshots stored as mappings with a declared field list."""

    def __init__(self, names: Iterable[str]) -> None:
        self._names = tuple(names)

    def field_names(self) -> tuple[str, ...]:
        return self._names

    def read(self, snapshot: Any, name: str) -> Any:
        if not isinstance(snapshot, Mapping):
            raise TypeError(f"expected a mapping snapshot, got {type(snapshot).__name__}")
        return snapshot[name]


@dataclass(frozen=True)
class VersionedType:
    """A catalog entry: descriptor, model class and field accessor."""

    descriptor: RecordTypeDescriptor
    model: type | None
    accessor: FieldAccessor


class TypeCatalog:
    """Explicit registration table of versioned record types.

    Registration happens at import time of the modules that declare the
    record types; the catalog is read-only afterwards as far as RevScope
    is concerned.
    """

    def __init__(self) -> None:
        self._entries: dict[str, VersionedType] = {}

    def register(
        self,
        type_id: str,
        model: type | None = None,
        *,
        abstract: bool | None = None,
        id_kind: IdentifierKind = IdentifierKind.NUMERIC,
        accessor: FieldAccessor | None = None,
    ) -> VersionedType:
        """Register a versioned type.

        ``abstract`` defaults to ``inspect.isabstract(model)``.  When no
        accessor is given the model must be a dataclass.

        Raises:
            ValueError: if *type_id* is blank or already registered.
            TypeError:  if no accessor can be derived for *model*.
        """
        if not type_id or not type_id.strip():
            raise ValueError("type_id must not be blank")
        if type_id in self._entries:
            raise ValueError(f"type {type_id!r} is already registered")
        if accessor is None:
            if model is None:
                raise TypeError(f"type {type_id!r} needs a model or an explicit accessor")
            accessor = DataclassFieldAccessor(model)
        if abstract is None:
            abstract = model is not None and inspect.isabstract(model)

        entry = VersionedType(
            descriptor=RecordTypeDescriptor(type_id=type_id, concrete=not abstract, id_kind=id_kind),
            model=model,
            accessor=accessor,
        )
        self._entries[type_id] = entry
        return entry

    def versioned(
        self,
        type_id: str,
        *,
        abstract: bool | None = None,
        id_kind: IdentifierKind = IdentifierKind.NUMERIC,
    ) -> Callable[[_C], _C]:
        """Class decorator form of :meth:`register`."""

        def _decorate(model: _C) -> _C:
            self.register(type_id, model, abstract=abstract, id_kind=id_kind)
            return model

        return _decorate

    def scan(self) -> list[RecordTypeDescriptor]:
        """Return the descriptors of every registered type, abstract ones included."""
        return [entry.descriptor for entry in self._entries.values()]

    def get(self, type_id: str) -> VersionedType | None:
        return self._entries.get(type_id)

    def accessor_for(self, type_id: str) -> FieldAccessor:
        """Return the field accessor for *type_id*.

        Raises:
            KeyError: if the type is not registered.
        """
        return self._entries[type_id].accessor

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, type_id: object) -> bool:
        return type_id in self._entries
