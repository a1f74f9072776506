"""Prometheus metrics for RevScope."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

source_queries_total = Counter(
    "revscope_source_queries_total",
    "Per-type store calls issued by the aggregator, by outcome",
    ["operation", "status"],
)

aggregation_duration_seconds = Histogram(
    "revscope_aggregation_duration_seconds",
    "Wall time of a cross-type fan-out including the merge",
    ["operation"],
    buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
)

diff_unreadable_fields_total = Counter(
    "revscope_diff_unreadable_fields_total",
    "Fields that could not be read while diffing snapshots",
    ["type_id"],
)
