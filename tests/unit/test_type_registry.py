"""Tests for TypeCatalog registration and the compute-once TypeRegistry."""

from __future__ import annotations

import threading
import time
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import ClassVar

import pytest

from revscope.errors import TypeScanError
from revscope.models.revisions import IdentifierKind, RecordTypeDescriptor
from revscope.registry.catalog import (
    DataclassFieldAccessor,
    MappingFieldAccessor,
    TypeCatalog,
)
from revscope.registry.type_registry import TypeRegistry

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class _Visit:
    visit_id: int
    patient_id: int
    note: str = ""
    table_name: ClassVar[str] = "visit"
    cached_label: str = field(default="", metadata={"versioned": False})


class _BaseData(ABC):
    @abstractmethod
    def describe(self) -> str: ...


class _ListSource:
    """Type-metadata source returning a fixed descriptor list and counting scans."""

    def __init__(self, descriptors: list[RecordTypeDescriptor], delay: float = 0.0) -> None:
        self._descriptors = descriptors
        self._delay = delay
        self.scans = 0
        self._lock = threading.Lock()

    def scan(self) -> list[RecordTypeDescriptor]:
        with self._lock:
            self.scans += 1
        if self._delay:
            time.sleep(self._delay)
        return list(self._descriptors)


class _FailingSource:
    def __init__(self) -> None:
        self.fail = True

    def scan(self) -> list[RecordTypeDescriptor]:
        if self.fail:
            raise RuntimeError("metadata unavailable")
        return [RecordTypeDescriptor("clinic.Patient")]


# ---------------------------------------------------------------------------
# TypeCatalog
# ---------------------------------------------------------------------------


class TestTypeCatalog:
    def test_decorator_registers_dataclass(self) -> None:
        catalog = TypeCatalog()

        @catalog.versioned("clinic.Encounter")
        @dataclass
        class Encounter:
            encounter_id: int

        assert "clinic.Encounter" in catalog
        entry = catalog.get("clinic.Encounter")
        assert entry is not None
        assert entry.model is Encounter
        assert entry.descriptor.concrete is True
        assert entry.accessor.field_names() == ("encounter_id",)

    def test_abstract_base_detected(self) -> None:
        catalog = TypeCatalog()
        catalog.register("clinic.BaseData", _BaseData, accessor=MappingFieldAccessor([]))
        assert catalog.scan()[0].concrete is False

    def test_explicit_abstract_flag_wins(self) -> None:
        catalog = TypeCatalog()
        catalog.register("clinic.Visit", _Visit, abstract=True)
        assert catalog.scan()[0].concrete is False

    def test_duplicate_registration_rejected(self) -> None:
        catalog = TypeCatalog()
        catalog.register("clinic.Visit", _Visit)
        with pytest.raises(ValueError):
            catalog.register("clinic.Visit", _Visit)

    def test_blank_type_id_rejected(self) -> None:
        with pytest.raises(ValueError):
            TypeCatalog().register("  ", _Visit)

    def test_non_dataclass_without_accessor_rejected(self) -> None:
        class Plain:
            pass

        with pytest.raises(TypeError):
            TypeCatalog().register("misc.Plain", Plain)

    def test_natural_key_kind_recorded(self) -> None:
        catalog = TypeCatalog()
        catalog.register("auth.Role", accessor=MappingFieldAccessor(["role"]), id_kind=IdentifierKind.NATURAL_KEY)
        assert catalog.scan()[0].id_kind is IdentifierKind.NATURAL_KEY

    def test_accessor_for_unknown_type_raises(self) -> None:
        with pytest.raises(KeyError):
            TypeCatalog().accessor_for("nope")


class TestFieldAccessors:
    def test_dataclass_accessor_skips_classvar_and_unversioned(self) -> None:
        accessor = DataclassFieldAccessor(_Visit)
        assert accessor.field_names() == ("visit_id", "patient_id", "note")

    def test_dataclass_accessor_reads_attribute(self) -> None:
        accessor = DataclassFieldAccessor(_Visit)
        assert accessor.read(_Visit(visit_id=1, patient_id=7), "patient_id") == 7

    def test_dataclass_accessor_rejects_plain_class(self) -> None:
        with pytest.raises(TypeError):
            DataclassFieldAccessor(object)

    def test_mapping_accessor_reads_key(self) -> None:
        accessor = MappingFieldAccessor(["role", "description"])
        assert accessor.read({"role": "Provider", "description": "x"}, "role") == "Provider"

    def test_mapping_accessor_missing_key_raises(self) -> None:
        accessor = MappingFieldAccessor(["role"])
        with pytest.raises(KeyError):
            accessor.read({}, "role")

    def test_mapping_accessor_rejects_non_mapping(self) -> None:
        accessor = MappingFieldAccessor(["role"])
        with pytest.raises(TypeError):
            accessor.read(["Provider"], "role")


# ---------------------------------------------------------------------------
# TypeRegistry
# ---------------------------------------------------------------------------


class TestListConcreteTypes:
    def test_filters_abstract_and_sorts(self) -> None:
        source = _ListSource(
            [
                RecordTypeDescriptor("clinic.Patient"),
                RecordTypeDescriptor("clinic.BaseData", concrete=False),
                RecordTypeDescriptor("clinic.Order"),
                RecordTypeDescriptor("auth.Role", id_kind=IdentifierKind.NATURAL_KEY),
            ]
        )
        registry = TypeRegistry(source)
        type_ids = [d.type_id for d in registry.list_concrete_versioned_types()]
        assert type_ids == ["auth.Role", "clinic.Order", "clinic.Patient"]

    def test_result_is_memoized(self) -> None:
        source = _ListSource([RecordTypeDescriptor("clinic.Patient")])
        registry = TypeRegistry(source)
        first = registry.list_concrete_versioned_types()
        second = registry.list_concrete_versioned_types()
        assert first is second
        assert source.scans == 1

    def test_concurrent_first_calls_scan_once(self) -> None:
        source = _ListSource(
            [RecordTypeDescriptor("clinic.Patient"), RecordTypeDescriptor("clinic.Order")],
            delay=0.05,
        )
        registry = TypeRegistry(source)
        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(lambda _: registry.list_concrete_versioned_types(), range(8)))
        assert source.scans == 1
        assert all(r == results[0] for r in results)
        assert len(results[0]) == 2

    def test_scan_failure_raises_type_scan_error(self) -> None:
        registry = TypeRegistry(_FailingSource())
        with pytest.raises(TypeScanError):
            registry.list_concrete_versioned_types()

    def test_scan_failure_is_not_cached(self) -> None:
        source = _FailingSource()
        registry = TypeRegistry(source)
        with pytest.raises(TypeScanError):
            registry.list_concrete_versioned_types()
        source.fail = False
        assert [d.type_id for d in registry.list_concrete_versioned_types()] == ["clinic.Patient"]

    def test_duplicate_type_ids_fail_the_scan(self) -> None:
        source = _ListSource([RecordTypeDescriptor("clinic.Patient"), RecordTypeDescriptor("clinic.Patient")])
        with pytest.raises(TypeScanError):
            TypeRegistry(source).list_concrete_versioned_types()

    def test_catalog_is_a_metadata_source(self) -> None:
        catalog = TypeCatalog()
        catalog.register("clinic.Visit", _Visit)
        catalog.register("clinic.BaseData", _BaseData, accessor=MappingFieldAccessor([]))
        registry = TypeRegistry(catalog)
        assert [d.type_id for d in registry.list_concrete_versioned_types()] == ["clinic.Visit"]


class TestResolve:
    def _registry(self) -> TypeRegistry:
        return TypeRegistry(
            _ListSource(
                [
                    RecordTypeDescriptor("clinic.Patient"),
                    RecordTypeDescriptor("billing.Order"),
                    RecordTypeDescriptor("clinic.Order"),
                    RecordTypeDescriptor("clinic.BaseData", concrete=False),
                ]
            )
        )

    def test_exact_type_id(self) -> None:
        descriptor = self._registry().resolve("clinic.Patient")
        assert descriptor is not None
        assert descriptor.type_id == "clinic.Patient"

    def test_unique_simple_name(self) -> None:
        descriptor = self._registry().resolve("Patient")
        assert descriptor is not None
        assert descriptor.type_id == "clinic.Patient"

    def test_ambiguous_simple_name_is_unresolved(self) -> None:
        assert self._registry().resolve("Order") is None

    def test_unknown_name_is_unresolved(self) -> None:
        assert self._registry().resolve("clinic.Missing") is None

    def test_abstract_type_is_unresolved(self) -> None:
        assert self._registry().resolve("clinic.BaseData") is None

    @pytest.mark.parametrize("name", [None, "", "   "])
    def test_blank_name_is_unresolved(self, name: str | None) -> None:
        assert self._registry().resolve(name) is None
