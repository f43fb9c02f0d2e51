"""
studenda.observability.logging

Structured logging configuration.

Responsibilities:
- Configure `structlog` for JSON logs.
- Provide a small wrapper for obtaining bound loggers.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog


def configure_logging(*, service_name: str, level: str) -> None:
    """
    Route stdlib and structlog output through a single JSON renderer on stdout.
    """

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level.upper(), logging.INFO),
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            _add_service_name(service_name),
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def _add_service_name(service_name: str):
    def processor(_: Any, __: str, event_dict: dict[str, Any]) -> dict[str, Any]:
        event_dict.setdefault("service", service_name)
        return event_dict

    return processor


def get_logger(name: str, **initial_values: Any) -> structlog.stdlib.BoundLogger:
    """
    Lazy logger for `name`; `initial_values` (e.g. `component="data_context"`)
    are attached to every event once the logger is first used, so module-level
    loggers still pick up `configure_logging` called later.
    """

    return structlog.get_logger(name, **initial_values)


# --- Module Notes -----------------------------------------------------------
# SQL echo is controlled separately through `Settings.echo_sql`, which hands
# statements to the stdlib `sqlalchemy.engine` logger configured here.
