"""Configuration data structures."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class AggregationConfig:
    """Cross-type fan-out configuration."""

    concurrency: int = 8
    timeout_seconds: float = 10.0
    safety_cap: int = 10_000


@dataclass
class PagingConfig:
    """Page size normalisation."""

    default_size: int = 20
    max_size: int = 500


@dataclass
class IdentityConfig:
    """Identity directory configuration."""

    endpoint: str = ""
    timeout_seconds: float = 5.0


@dataclass
class LogConfig:
    """Logging configuration."""

    level: str = "info"
    format: str = "json"


@dataclass
class RevScopeConfig:
    """Top-level RevScope configuration."""

    aggregation: AggregationConfig = field(default_factory=AggregationConfig)
    paging: PagingConfig = field(default_factory=PagingConfig)
    identity: IdentityConfig = field(default_factory=IdentityConfig)
    log: LogConfig = field(default_factory=LogConfig)
