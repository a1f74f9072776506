"""structlog setup for RevScope.

Events are rendered as JSON lines on stderr by default; ``fmt="console"``
switches to structlog's coloured key/value renderer for local runs.  The
stdlib root logger is pointed at the same stream so httpx and other
libraries stay quiet below WARNING.
"""

from __future__ import annotations

import logging
import sys
from typing import TextIO

import structlog

LOG_FORMATS = ("json", "console")


def setup_logging(level: str = "info", fmt: str = "json", stream: TextIO | None = None) -> None:
    """Configure structlog processors, level filtering and output stream."""
    if fmt not in LOG_FORMATS:
        raise ValueError(f"Invalid log format: {fmt}. Must be one of {LOG_FORMATS}")
    log_level = getattr(logging, level.upper(), logging.INFO)
    out = stream or sys.stderr

    renderer: structlog.types.Processor
    if fmt == "console":
        renderer = structlog.dev.ConsoleRenderer(colors=out.isatty())
    else:
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True, key="ts"),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=out),
        cache_logger_on_first_use=True,
    )
    logging.basicConfig(stream=out, level=max(log_level, logging.WARNING), force=True)


def get_logger(component: str) -> structlog.stdlib.BoundLogger:
    """Return a logger bound to *component* (``aggregator``, ``service``, ...)."""
    return structlog.get_logger(component=component)  # type: ignore[no-any-return]
