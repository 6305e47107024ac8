"""Logging configuration and helpers for the command-line application.

Logs go to stderr so that the credential printed on stdout can be captured
by the calling shell.
"""

import logging
import sys
import time
from collections.abc import Iterator
from contextlib import contextmanager

import structlog


def configure_logging(log_level: str = "INFO", *, dev_mode: bool = False) -> None:
    """Configure structlog for the process.

    Args:
        log_level: Minimum level name (DEBUG, INFO, WARNING, ERROR).
        dev_mode: Render human-readable console output instead of JSON lines.
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    processors: list[structlog.typing.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]
    if dev_mode:
        processors.append(structlog.dev.ConsoleRenderer())
    else:
        processors.extend(
            [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
        )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


@contextmanager
def observe_around(
    logger: structlog.typing.FilteringBoundLogger, operation: str
) -> Iterator[None]:
    """Log the start, completion and failure of an operation with its duration."""
    started = time.monotonic()
    logger.debug(f"{operation}_STARTED")
    try:
        yield
    except Exception:
        logger.warning(
            f"{operation}_FAILED",
            duration_ms=round((time.monotonic() - started) * 1000, 2),
        )
        raise
    logger.debug(
        f"{operation}_COMPLETED",
        duration_ms=round((time.monotonic() - started) * 1000, 2),
    )
