"""
Structured logging for insight_client: JSON lines keyed by event_type.

Each InsightClient binds its own logger (bind_client) and passes it to the
components it builds, so events from several clients in one process carry
their own client_id and api_host.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Any, TextIO

import structlog


def _level_from_env() -> int:
    return getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO)


def _format_from_env() -> str:
    # json unless LOG_FORMAT says otherwise (console for local runs)
    return os.getenv("LOG_FORMAT", "json").strip().lower()


def configure_structlog(
    level: int | None = None,
    fmt: str | None = None,
    stream: TextIO | None = None,
) -> None:
    """
    Configure structlog for the package.

    Called once on first import with LOG_LEVEL / LOG_FORMAT from the
    environment; call again to redirect or reformat output.
    """
    stream = stream or sys.stdout
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.EventRenamer("event_type"),
    ]
    if (fmt or _format_from_env()) == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=stream.isatty(), event_key="event_type"))
    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level if level is not None else _level_from_env()),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream),
        cache_logger_on_first_use=False,
    )


if not structlog.is_configured():
    configure_structlog()


def get_logger(name: str) -> structlog.BoundLogger:
    """
    Return a structured logger for the given module name.

        logger = get_logger(__name__)
        logger.info("push_connected", url=url)
    """
    return structlog.get_logger(name).bind(logger=name)


def bind_client(client_id: str, api_host: str) -> structlog.BoundLogger:
    """Logger with client_id and api_host bound, shared by one client's components."""
    return get_logger("insight_client").bind(client_id=client_id, api_host=api_host)
