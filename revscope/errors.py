"""Exception taxonomy for RevScope.

Only ``UnsupportedIdentifierTypeError`` and ``TypeScanError`` are meant to
reach callers of the service facade.  Store errors are absorbed at the
per-type boundary of the aggregator and identity lookup errors are
absorbed by the resolver.
"""

from __future__ import annotations


class RevScopeError(Exception):
    """Base class for all RevScope errors."""


class StoreError(RevScopeError):
    """A versioned store call for one record type failed."""

    def __init__(self, type_id: str, message: str) -> None:
        super().__init__(f"{type_id}: {message}")
        self.type_id = type_id


class SchemaUnavailableError(StoreError):
    """The type exists logically but its backing storage is not provisioned."""


class TransientStoreError(StoreError):
    """Any other per-type query failure (malformed query, connection loss, ...)."""


class UnsupportedIdentifierTypeError(RevScopeError):
    """A point lookup was given an entity identifier the store cannot route."""

    def __init__(self, type_id: str, entity_id: object) -> None:
        super().__init__(
            f"Unsupported identifier {entity_id!r} ({type(entity_id).__name__}) for type {type_id}"
        )
        self.type_id = type_id
        self.entity_id = entity_id


class TypeScanError(RevScopeError):
    """Discovering the set of versioned types failed as a whole."""


class IdentityLookupError(RevScopeError):
    """The identity directory could not be queried."""
