"""Configuration loading from environment variables."""

from __future__ import annotations

import os

from revscope.models.config import (
    AggregationConfig,
    IdentityConfig,
    LogConfig,
    PagingConfig,
    RevScopeConfig,
)
from revscope.observability.logging import LOG_FORMATS


def _env(key: str, default: str = "") -> str:
    return os.environ.get(f"REVSCOPE_{key}", default)


def _env_int(key: str, default: int, min_val: int | None = None, max_val: int | None = None) -> int:
    val = int(_env(key, str(default)))
    if min_val is not None:
        val = max(val, min_val)
    if max_val is not None:
        val = min(val, max_val)
    return val


def _env_float(key: str, default: float, min_val: float | None = None) -> float:
    val = float(_env(key, str(default)))
    if min_val is not None:
        val = max(val, min_val)
    return val


def _validate_log_level(value: str) -> str:
    valid = {"debug", "info", "warning", "error"}
    if value.lower() not in valid:
        raise ValueError(f"Invalid log level: {value}. Must be one of {valid}")
    return value.lower()


def _validate_log_format(value: str) -> str:
    if value.lower() not in LOG_FORMATS:
        raise ValueError(f"Invalid log format: {value}. Must be one of {LOG_FORMATS}")
    return value.lower()


def _validate_endpoint(value: str) -> str:
    if value and not value.startswith(("http://", "https://")):
        raise ValueError(f"Identity endpoint must be an http(s) URL, got: {value!r}")
    return value.rstrip("/")


def load_config() -> RevScopeConfig:
    """Load configuration from REVSCOPE_* environment variables."""
    max_size = _env_int("PAGE_SIZE_MAX", 500, min_val=1, max_val=10_000)
    return RevScopeConfig(
        aggregation=AggregationConfig(
            concurrency=_env_int("AGGREGATION_CONCURRENCY", 8, min_val=1, max_val=64),
            timeout_seconds=_env_float("AGGREGATION_TIMEOUT", 10.0, min_val=0.1),
            safety_cap=_env_int("AGGREGATION_SAFETY_CAP", 10_000, min_val=100, max_val=1_000_000),
        ),
        paging=PagingConfig(
            default_size=_env_int("PAGE_SIZE_DEFAULT", 20, min_val=1, max_val=max_size),
            max_size=max_size,
        ),
        identity=IdentityConfig(
            endpoint=_validate_endpoint(_env("IDENTITY_ENDPOINT", "")),
            timeout_seconds=_env_float("IDENTITY_TIMEOUT", 5.0, min_val=0.1),
        ),
        log=LogConfig(
            level=_validate_log_level(_env("LOG_LEVEL", "info")),
            format=_validate_log_format(_env("LOG_FORMAT", "json")),
        ),
    )
