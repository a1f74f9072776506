"""Cross-type revision aggregation for RevScope."""

from revscope.aggregator.fanout import (
    AggregatedCount,
    AggregatedRevisions,
    RevisionAggregator,
    SourceOutcome,
    SourceStatus,
    order_revisions,
    slice_page,
)

__all__ = [
    "AggregatedCount",
    "AggregatedRevisions",
    "RevisionAggregator",
    "SourceOutcome",
    "SourceStatus",
    "order_revisions",
    "slice_page",
]
