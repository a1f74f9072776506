"""Versioned store contract and adapters.

Submodules:
    base         -- VersionedStoreClient ABC and StoredRevision.
    identifiers  -- Entity identifier routing (numeric vs natural keys).
    memory       -- In-process store implementation.
"""

from revscope.store.base import StoredRevision, VersionedStoreClient
from revscope.store.identifiers import route_entity_id
from revscope.store.memory import InMemoryVersionedStore

__all__ = [
    "InMemoryVersionedStore",
    "StoredRevision",
    "VersionedStoreClient",
    "route_entity_id",
]
