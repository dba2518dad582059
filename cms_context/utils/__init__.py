"""Utility modules for cms-context.

- **errors** -- Exception hierarchy rooted at ContentContextError; the tool
  layer turns each subclass into a failure envelope.
- **concurrency** -- Semaphore-bounded ``asyncio.gather`` used for per-kind
  catalog sampling, plus first-error re-raise once siblings settle.
- **logging** -- structlog setup with a dual-renderer pattern: coloured
  console output in development, structured JSON in production.
"""

from cms_context.utils.concurrency import raise_first_error, throttled_gather
from cms_context.utils.errors import (
    ConfigurationError,
    ContentContextError,
    DocumentNotFoundError,
    QueryError,
)
from cms_context.utils.logging import configure_logging, get_logger

__all__ = [
    "ConfigurationError",
    "ContentContextError",
    "DocumentNotFoundError",
    "QueryError",
    "configure_logging",
    "get_logger",
    "raise_first_error",
    "throttled_gather",
]
