"""Shared fixtures for RevScope integration tests.

Provides a small clinic data model registered in a TypeCatalog, an
in-memory versioned store seeded with a realistic revision history and
a RevisionService wired on top of both, so tests exercise the full
registry -> aggregator -> diff -> identity pipeline.
"""

from __future__ import annotations

from abc import ABC
from dataclasses import dataclass, field
from datetime import UTC, date, datetime, timedelta

import pytest

from revscope.identity.memory_directory import InMemoryIdentityDirectory
from revscope.identity.resolver import Actor
from revscope.models.config import AggregationConfig, PagingConfig, RevScopeConfig
from revscope.models.revisions import IdentifierKind
from revscope.registry.catalog import MappingFieldAccessor, TypeCatalog
from revscope.service import RevisionService, build_revision_service
from revscope.store.memory import InMemoryVersionedStore

# ---------------------------------------------------------------------------
# Timestamp helpers
# ---------------------------------------------------------------------------

T0 = datetime(2025, 3, 1, 8, 0, tzinfo=UTC)


def at(minutes: int) -> datetime:
    """Return T0 shifted by *minutes*."""
    return T0 + timedelta(minutes=minutes)


# ---------------------------------------------------------------------------
# Clinic data model
# ---------------------------------------------------------------------------


class BaseClinicalData(ABC):  # noqa: B024
    """Common base of clinical records; never versioned on its own."""


@dataclass(frozen=True)
class Patient(BaseClinicalData):
    patient_id: int
    given_name: str
    family_name: str
    birthdate: date | None = None
    voided: bool = False


@dataclass(frozen=True)
class Order(BaseClinicalData):
    order_id: int
    patient_id: int
    drug: str
    dose_mg: float
    search_text: str = field(default="", metadata={"versioned": False})


def make_catalog() -> TypeCatalog:
    """Catalog with two concrete numeric types, one natural-key type and an abstract base."""
    catalog = TypeCatalog()
    catalog.register("clinic.BaseClinicalData", BaseClinicalData, abstract=True, accessor=MappingFieldAccessor([]))
    catalog.register("clinic.Patient", Patient)
    catalog.register("clinic.Order", Order)
    catalog.register(
        "auth.Role",
        accessor=MappingFieldAccessor(["role", "description"]),
        id_kind=IdentifierKind.NATURAL_KEY,
    )
    return catalog


def make_directory() -> InMemoryIdentityDirectory:
    return InMemoryIdentityDirectory(
        [
            Actor(actor_id=1, display_name="Super User", system_id="admin", username="admin"),
            Actor(actor_id=2, display_name="", system_id="sysid1", username="clerk"),
            Actor(actor_id=3, display_name="Nurse Jackie", system_id="nj", username="jackie"),
        ]
    )


def seed_history(store: InMemoryVersionedStore) -> None:
    """Record a day of clinic activity across all concrete types.

    Timeline (minutes after T0):
        0  Patient 1 added        (admin)
        5  Role Provider added    (admin)
        10 Order 100 added        (jackie)
        20 Patient 1 modified     (clerk)
        30 Order 100 modified     (jackie)
        40 Patient 2 added        (jackie)
        50 Patient 1 deleted      (admin)
    """
    ada = Patient(patient_id=1, given_name="Ada", family_name="Byron")
    store.record("clinic.Patient", 1, ada, timestamp=at(0), actor_id=1)
    store.record(
        "auth.Role",
        "Provider",
        {"role": "Provider", "description": "Sees patients"},
        timestamp=at(5),
        actor_id=1,
    )
    store.record(
        "clinic.Order",
        100,
        Order(order_id=100, patient_id=1, drug="Amoxicillin", dose_mg=250.0),
        timestamp=at(10),
        actor_id=3,
    )
    store.record(
        "clinic.Patient",
        1,
        Patient(patient_id=1, given_name="Ada", family_name="Lovelace", birthdate=date(1815, 12, 10)),
        timestamp=at(20),
        actor_id=2,
    )
    store.record(
        "clinic.Order",
        100,
        Order(order_id=100, patient_id=1, drug="Amoxicillin", dose_mg=500.0, search_text="amox"),
        timestamp=at(30),
        actor_id=3,
    )
    store.record(
        "clinic.Patient",
        2,
        Patient(patient_id=2, given_name="Grace", family_name="Hopper"),
        timestamp=at(40),
        actor_id=3,
    )
    store.record("clinic.Patient", 1, None, timestamp=at(50), actor_id=1)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def catalog() -> TypeCatalog:
    return make_catalog()


@pytest.fixture
def store() -> InMemoryVersionedStore:
    store = InMemoryVersionedStore()
    seed_history(store)
    return store


@pytest.fixture
def directory() -> InMemoryIdentityDirectory:
    return make_directory()


@pytest.fixture
def service(
    catalog: TypeCatalog,
    store: InMemoryVersionedStore,
    directory: InMemoryIdentityDirectory,
) -> RevisionService:
    """RevisionService over the seeded store with small page limits."""
    config = RevScopeConfig(
        aggregation=AggregationConfig(concurrency=4, timeout_seconds=2.0, safety_cap=1_000),
        paging=PagingConfig(default_size=3, max_size=5),
    )
    return build_revision_service(catalog, store, directory=directory, config=config)
