"""Structured logging for bitable-db.

Every core module logs through structlog with a bound `component` so that
remote failures, partial schema reconciliation and best-effort
degradations can be told apart in aggregated logs. Log events are short
snake_case identifiers with keyword context, e.g.:

    log.warning("field_update_failed", app_token="...", field="age", error="...")

`setup_logging` is called once by frontends (the CLI). Library users that
never call it still get structlog's default console output.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict

_APP = "bitable-db"


def add_app_context(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Stamp every entry with the application identifier."""
    event_dict["app"] = _APP
    return event_dict


def setup_logging(
    level: str = "WARNING",
    json_logs: bool = False,
    include_timestamp: bool = True,
) -> None:
    """
    Configure structlog on top of the standard library logging module.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        json_logs: Render JSON lines instead of the coloured console format.
        include_timestamp: Prepend an ISO timestamp to each entry.
    """
    log_level = getattr(logging, level.upper(), logging.WARNING)

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=log_level,
        force=True,
    )
    logging.getLogger().setLevel(log_level)

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        add_app_context,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]
    if include_timestamp:
        processors.insert(0, structlog.processors.TimeStamper(fmt="iso"))

    if json_logs:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(
                colors=sys.stderr.isatty(),
                exception_formatter=structlog.dev.plain_traceback,
            )
        )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None, component: str | None = None, **context: Any):
    """
    Return a lazy structlog logger carrying module and component context.

    The logger is only materialized on first use, so module-level loggers
    pick up whatever `setup_logging` configured after import.
    """
    bound: dict[str, Any] = {}
    if component:
        bound["component"] = component
    if name:
        bound["module"] = name
    bound.update(context)

    if name:
        return structlog.get_logger(name, **bound)
    return structlog.get_logger(**bound)
