"""Structured logging for analyses."""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import structlog

from gatekeeper.config import get_settings

# Client libraries that log every request at INFO
QUIET_LOGGERS = ("httpx", "httpcore", "hpack")


def resolve_level(name: str | None) -> int:
    """Map a level name to its numeric value, defaulting to INFO."""
    if not name:
        return logging.INFO
    return logging.getLevelNamesMapping().get(name.upper(), logging.INFO)


def build_renderer(json_logs: bool) -> Any:
    if json_logs:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(
        colors=sys.stderr.isatty(),
        exception_formatter=structlog.dev.plain_traceback,
    )


def setup_logging(level: str | None = None, json_logs: bool | None = None) -> None:
    """
    Configure structlog for the process.

    Crawler, scorer and service loggers all go through the same chain, so
    anything bound with ``analysis_context`` shows up on every line.

    Args:
        level: Level name such as "DEBUG"; defaults to the LOG_LEVEL setting
        json_logs: Emit JSON lines; defaults to on in production
    """
    settings = get_settings()
    log_level = resolve_level(level or settings.log_level)
    if json_logs is None:
        json_logs = settings.is_production

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]
    if json_logs:
        processors.append(structlog.processors.format_exc_info)
    else:
        processors.append(structlog.dev.set_exc_info)
    processors.append(build_renderer(json_logs))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=not settings.is_test,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=log_level)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))


@contextmanager
def analysis_context(session_id: str, url: str) -> Iterator[None]:
    """Tag log lines emitted inside the block with the running analysis."""
    with structlog.contextvars.bound_contextvars(session_id=session_id, site=url):
        yield
