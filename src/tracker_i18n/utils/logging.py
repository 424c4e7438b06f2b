"""Structured logging setup using structlog."""

from __future__ import annotations

import logging
import sys
from typing import Literal

import structlog

LogFormat = Literal["json", "console"]


def setup_logging(log_level: str = "INFO", *, log_format: LogFormat = "json"):
    """Configure structlog to write one event per line to stdout.

    Call once at startup. ``log_format="console"`` swaps the JSON renderer for
    structlog's coloured dev renderer. Unknown level names fall back to INFO.
    """
    level = getattr(logging, log_level.upper(), logging.INFO)
    renderer = (
        structlog.dev.ConsoleRenderer()
        if log_format == "console"
        else structlog.processors.JSONRenderer()
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            # Failed effects are logged with logger.exception()
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
    )


def get_logger(name: str) -> structlog.BoundLogger:
    """Return a bound logger for the given component *name*."""
    return structlog.get_logger(name)
