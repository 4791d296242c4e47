"""Structured logging configuration using structlog.

Discovery runs inside a host process, so configuration is opt-in: until
:func:`setup_logging` is called, loggers follow whatever structlog setup the
host already installed.
"""

from __future__ import annotations

import logging
import sys

import structlog

_FORMATS = ("json", "console")


def setup_logging(level: str = "info", fmt: str = "json") -> None:
    """Configure structlog output to stderr.

    Args:
        level: Minimum level name (``debug``, ``info``, ``warning``, ``error``).
        fmt: ``json`` for one JSON object per line, ``console`` for
            human-readable local output.
    """
    if fmt not in _FORMATS:
        raise ValueError(f"Invalid log format: {fmt}. Must be one of {_FORMATS}")
    log_level = getattr(logging, level.upper(), logging.INFO)

    renderer: structlog.typing.Processor
    if fmt == "console":
        renderer = structlog.dev.ConsoleRenderer(colors=False)
    else:
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso", utc=True, key="ts"),
            # ConsoleRenderer formats tracebacks itself.
            *([structlog.processors.format_exc_info] if fmt == "json" else []),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def get_logger(component: str) -> structlog.stdlib.BoundLogger:
    """Get a logger bound with a component name."""
    return structlog.get_logger(component=component)  # type: ignore[return-value]
