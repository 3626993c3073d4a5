"""structlog setup for hostdoctor.

Everything logged here ends up on stderr. stdout carries only the report,
so ``hostdoctor --format json | jq`` sees clean JSON.
"""

from __future__ import annotations

import logging
import sys
from typing import List, Literal

import structlog


def _level_number(log_level: str) -> int:
    return getattr(logging, log_level.upper(), logging.WARNING)


def _build_processors(log_format: str) -> List[structlog.typing.Processor]:
    processors: List[structlog.typing.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    if log_format == "json":
        processors.append(structlog.processors.dict_tracebacks)
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))
    return processors


def configure_logging(
    log_format: Literal["json", "text"] = "text",
    log_level: str = "WARNING",
) -> None:
    """Set up structlog and the stdlib root logger.

    Args:
        log_format: "json" emits one object per line, "text" a console layout.
        log_level: Minimum level name; unknown names fall back to WARNING.
    """
    level = _level_number(log_level)

    structlog.configure(
        processors=_build_processors(log_format),
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )

    # apscheduler logs through the stdlib
    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=level)


def get_logger() -> structlog.stdlib.BoundLogger:
    """Return a structlog logger bound to the current configuration."""
    return structlog.get_logger()
