"""Core data structures for RevScope."""

from revscope.models.config import RevScopeConfig
from revscope.models.revisions import (
    ActorId,
    ChangeKind,
    EntityId,
    FieldDiff,
    IdentifierKind,
    Page,
    RecordTypeDescriptor,
    RevisionDetail,
    RevisionFilters,
    RevisionRecord,
    SortOrder,
)

__all__ = [
    "ActorId",
    "ChangeKind",
    "EntityId",
    "FieldDiff",
    "IdentifierKind",
    "Page",
    "RecordTypeDescriptor",
    "RevScopeConfig",
    "RevisionDetail",
    "RevisionFilters",
    "RevisionRecord",
    "SortOrder",
]
