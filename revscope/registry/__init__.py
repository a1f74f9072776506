"""Versioned type discovery for RevScope.

Submodules:
    catalog        -- Static registration table and per-type field accessors.
    type_registry  -- Compute-once cache of the concrete versioned types.
"""

from revscope.registry.catalog import (
    DataclassFieldAccessor,
    FieldAccessor,
    MappingFieldAccessor,
    TypeCatalog,
    VersionedType,
)
from revscope.registry.type_registry import TypeMetadataSource, TypeRegistry

__all__ = [
    "DataclassFieldAccessor",
    "FieldAccessor",
    "MappingFieldAccessor",
    "TypeCatalog",
    "TypeMetadataSource",
    "TypeRegistry",
    "VersionedType",
]
