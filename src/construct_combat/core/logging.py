"""Structured logging for the Construct combat engine.

Engine diagnostics go through structlog. Narration meant for players and
the AI orchestrator goes through the event channel instead, so log lines
stay terse and machine-friendly.

Example:
    >>> from construct_combat.core.logging import configure_logging, get_logger
    >>> configure_logging(level="DEBUG")
    >>> get_logger(__name__).info("Combat started", participants=3)
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING

import structlog
from structlog.types import Processor


if TYPE_CHECKING:
    from structlog.types import EventDict, WrappedLogger

    from construct_combat.core.config import Settings


_STDLIB_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def add_engine_context(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Tag every entry with the engine name unless a caller already did."""
    event_dict.setdefault("app", "construct_combat")
    return event_dict


def build_processors(*, json_format: bool) -> list[Processor]:
    """Assemble the structlog processor chain.

    Args:
        json_format: Render JSON lines instead of the colored console view.

    Returns:
        Processors ending in the selected renderer.
    """
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        add_engine_context,
        structlog.processors.StackInfoRenderer(),
    ]
    if json_format:
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(sort_keys=True),
        ]
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(exception_formatter=structlog.dev.plain_traceback)
        )
    return processors


def configure_logging(
    *,
    level: str | None = None,
    json_format: bool | None = None,
    log_file: str | None = None,
    settings: Settings | None = None,
) -> None:
    """Configure structlog and the standard library root logger.

    Explicit arguments win; anything left as None comes from ``settings``
    (or the cached application settings).

    Args:
        level: Logging level name.
        json_format: Emit JSON lines for log shippers.
        log_file: Optional file that also receives standard library records.
        settings: Settings to read defaults from.
    """
    if level is None or json_format is None:
        if settings is None:
            from construct_combat.core.config import get_settings

            settings = get_settings()
        level = level or settings.log_level
        json_format = settings.json_logs if json_format is None else json_format

    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    structlog.configure(
        processors=build_processors(json_format=json_format),
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=False,
    )

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    logging.basicConfig(format=_STDLIB_FORMAT, level=numeric_level, handlers=handlers, force=True)


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    """Get a structlog logger, typically ``get_logger(__name__)``."""
    return structlog.get_logger(name)


__all__ = [
    "add_engine_context",
    "build_processors",
    "configure_logging",
    "get_logger",
]
