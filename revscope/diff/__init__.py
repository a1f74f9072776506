"""Snapshot diffing for RevScope."""

from revscope.diff.engine import UNREADABLE, FieldDiffEngine, classify_change, describe_change_kind

__all__ = ["UNREADABLE", "FieldDiffEngine", "classify_change", "describe_change_kind"]
