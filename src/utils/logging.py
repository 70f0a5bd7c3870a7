# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Structured logging configuration using structlog.

The service layer logs structured events through structlog; engines,
clocks and stores log through the standard library. ``setup_logging``
routes both to stdout at the configured level: JSON in production,
console output in development.

Example:
    >>> from src.utils.logging import setup_logging, get_logger, log_context
    >>> from src.core.config import get_settings
    >>> setup_logging(get_settings())
    >>> logger = get_logger(__name__)
    >>> with log_context(user_id="u-1", game_type="memory"):
    ...     logger.info("session_recorded", score=420)
"""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING

import structlog
from structlog.types import Processor

if TYPE_CHECKING:
    from src.core.config.settings import Settings

QUIET_LOGGERS = ("sqlalchemy.engine", "sqlalchemy.pool", "asyncio")


def setup_logging(settings: "Settings") -> None:
    """Configure structlog and standard library logging.

    Args:
        settings: Application settings providing log_level, debug and
            environment.
    """
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]

    renderer: Processor
    if settings.is_development or settings.debug:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())
        processors = [*shared_processors, renderer]
    else:
        renderer = structlog.processors.JSONRenderer()
        processors = [*shared_processors, structlog.processors.format_exc_info, renderer]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=not settings.debug,
    )

    logging.basicConfig(
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stdout,
        level=log_level,
    )
    logging.getLogger("src").setLevel(log_level)

    # Statement echo is controlled by STORAGE_ECHO, not the log level
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger for the given module name."""
    return structlog.get_logger(name)


@contextmanager
def log_context(**kwargs: object) -> Iterator[None]:
    """Bind values to every structured log event inside the block.

    Previously bound values are restored on exit, so nested blocks (a
    workout recording each of its games) do not leak into each other.

    Example:
        >>> with log_context(user_id="user-456", game_type="memory"):
        ...     logger.info("preferences_saved")  # includes user_id and game_type
    """
    with structlog.contextvars.bound_contextvars(**kwargs):
        yield


def clear_context() -> None:
    """Drop every bound context value."""
    structlog.contextvars.clear_contextvars()
