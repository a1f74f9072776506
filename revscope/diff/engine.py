"""Field-level diff between two snapshots of the same record.

Fields are enumerated through the record type's FieldAccessor, never by
inspecting the snapshot itself, so both sides are compared over the same
static shape.  Values are compared by their ``str()`` text; ``None`` stays
``None``.  A field that cannot be read on either side is reported with the
``"Unable to read"`` sentinel and is never flagged as changed.
"""

from __future__ import annotations

from typing import Any

from revscope.models.revisions import ChangeKind, FieldDiff
from revscope.observability.logging import get_logger
from revscope.observability.metrics import diff_unreadable_fields_total
from revscope.registry.catalog import FieldAccessor, TypeCatalog

_log = get_logger("diff")

UNREADABLE = "Unable to read"

_CHANGE_DESCRIPTIONS = {
    ChangeKind.ADDED: "Record was added",
    ChangeKind.MODIFIED: "Record was modified",
    ChangeKind.DELETED: "Record was deleted",
}


class FieldDiffEngine:
    """Computes FieldDiff lists using the accessors registered in a TypeCatalog."""

    def __init__(self, catalog: TypeCatalog) -> None:
        self._catalog = catalog

    def diff(self, type_id: str, old_snapshot: Any | None, new_snapshot: Any | None) -> list[FieldDiff]:
        """Compare *old_snapshot* (None for a first revision) with *new_snapshot*.

        Returns one FieldDiff per instance-level field of the type, in
        declaration order.  A missing *new_snapshot* (e.g. a deletion with
        no stored state) yields an empty list.

        Raises:
            KeyError: if *type_id* is not registered in the catalog.
        """
        if new_snapshot is None:
            return []
        accessor = self._catalog.accessor_for(type_id)

        diffs: list[FieldDiff] = []
        for name in accessor.field_names():
            new_text, new_ok = self._read(type_id, accessor, new_snapshot, name)
            old_text, old_ok = self._read(type_id, accessor, old_snapshot, name)
            changed = new_ok and old_ok and old_text != new_text
            diffs.append(FieldDiff(field_name=name, old_value=old_text, new_value=new_text, changed=changed))
        return diffs

    def _read(
        self,
        type_id: str,
        accessor: FieldAccessor,
        snapshot: Any | None,
        name: str,
    ) -> tuple[str | None, bool]:
        if snapshot is None:
            return None, True
        try:
            value = accessor.read(snapshot, name)
            return (None if value is None else str(value)), True
        except Exception as exc:  # noqa: BLE001
            _log.debug("field_unreadable", type_id=type_id, field=name, error=repr(exc))
            diff_unreadable_fields_total.labels(type_id=type_id).inc()
            return UNREADABLE, False


def classify_change(old_snapshot: Any | None, new_snapshot: Any | None) -> ChangeKind:
    """Derive the change kind from which snapshots are present."""
    if old_snapshot is None and new_snapshot is not None:
        return ChangeKind.ADDED
    if old_snapshot is not None and new_snapshot is None:
        return ChangeKind.DELETED
    if old_snapshot is not None and new_snapshot is not None:
        return ChangeKind.MODIFIED
    return ChangeKind.UNKNOWN


def describe_change_kind(kind: ChangeKind | None) -> str:
    """Human-readable sentence for a change kind."""
    if kind is None:
        return "Unknown change type"
    return _CHANGE_DESCRIPTIONS.get(kind, "Unknown change type")
