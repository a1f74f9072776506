"""Routing of caller-supplied entity identifiers to store key shapes."""

from __future__ import annotations

from revscope.errors import UnsupportedIdentifierTypeError
from revscope.models.revisions import EntityId, IdentifierKind, RecordTypeDescriptor


def route_entity_id(descriptor: RecordTypeDescriptor, entity_id: object) -> EntityId:
    """Convert *entity_id* into the key shape the type is stored under.

    NUMERIC types take ints or digit strings (returned as int).  NATURAL_KEY
    types take non-blank strings (returned stripped).  Everything else,
    including bools and floats, cannot be routed.

    Raises:
        UnsupportedIdentifierTypeError: if the identifier has an unroutable shape.
    """
    # bool is an int subclass
    if isinstance(entity_id, bool):
        raise UnsupportedIdentifierTypeError(descriptor.type_id, entity_id)

    if descriptor.id_kind is IdentifierKind.NUMERIC:
        if isinstance(entity_id, int):
            return entity_id
        if isinstance(entity_id, str):
            text = entity_id.strip()
            if text.isdecimal():
                return int(text)
        raise UnsupportedIdentifierTypeError(descriptor.type_id, entity_id)

    if isinstance(entity_id, str) and entity_id.strip():
        return entity_id.strip()
    raise UnsupportedIdentifierTypeError(descriptor.type_id, entity_id)
