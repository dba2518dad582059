"""Structured logging setup using structlog.

Every log line goes to **stderr** so that stdout stays reserved for the
CLI's JSON envelopes.  Two renderers share one processor chain:

* console -- human-readable, coloured only when the stream is a terminal
* JSON    -- one object per line, exceptions pre-formatted into the event

The CLI picks JSON when ``APP_ENV`` is ``production``.  Records emitted
through the standard library (httpx in particular) are routed through the
same chain via :class:`structlog.stdlib.ProcessorFormatter`, with httpx's
per-request INFO lines held back unless the level is WARNING or lower.

Request-scoped keys (for example the running tool ``operation``) are bound
with :func:`structlog.contextvars.bound_contextvars` and merged into every
event logged while they are in scope.
"""

import logging
import sys
from typing import TextIO

import structlog

_QUIET_LIBRARIES = ("httpx", "httpcore")


def _resolve_level(log_level: str) -> int:
    """Map a level name to its numeric value; unknown names fall back to INFO."""
    level = logging.getLevelName(str(log_level).upper())
    return level if isinstance(level, int) else logging.INFO


def _shared_processors() -> list[structlog.types.Processor]:
    # contextvars first so bound keys sit alongside the event's own keys.
    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]


def _renderers(json_output: bool, stream: TextIO) -> list[structlog.types.Processor]:
    if json_output:
        return [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    colors = bool(getattr(stream, "isatty", lambda: False)())
    return [structlog.dev.ConsoleRenderer(colors=colors)]


def _route_stdlib(level: int, renderers: list[structlog.types.Processor], stream: TextIO) -> None:
    """Send standard-library records through the structlog renderers."""
    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=_shared_processors(),
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, *renderers],
    )
    handler = logging.StreamHandler(stream)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    for name in _QUIET_LIBRARIES:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def configure_logging(
    log_level: str = "INFO",
    json_output: bool = False,
    stream: TextIO | None = None,
) -> structlog.BoundLogger:
    """Configure structlog and the stdlib bridge.

    Args:
        log_level: Level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).  An
            unrecognised name logs at INFO.
        json_output: Render one JSON object per line instead of console text.
        stream: Destination for every log line; defaults to ``sys.stderr``.

    Returns:
        A configured structlog BoundLogger.
    """
    stream = stream or sys.stderr
    level = _resolve_level(log_level)
    renderers = _renderers(json_output, stream)

    structlog.configure(
        processors=[*_shared_processors(), *renderers],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream),
        cache_logger_on_first_use=True,
    )
    _route_stdlib(level, renderers, stream)

    return structlog.get_logger()


def get_logger(name: str) -> structlog.BoundLogger:
    """Return a structlog logger bound with ``logger_name=name``.

    Falls back to :func:`configure_logging` defaults when nothing has
    configured structlog yet (library use without the CLI).
    """
    if not structlog.is_configured():
        configure_logging()

    return structlog.get_logger(logger_name=name)
