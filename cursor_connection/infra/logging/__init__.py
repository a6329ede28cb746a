"""Logging helpers.

The library only creates loggers; handler and level configuration is left
to the application.

Usage:
    from cursor_connection.infra.logging import get_lazy_logger

    logger = get_lazy_logger(__name__)
    logger.debug(lambda: f"Expensive: {render(predicate)}")  # Only runs if DEBUG enabled
"""

from cursor_connection.infra.logging.lazy import LazyLoggerAdapter, get_lazy_logger

__all__ = [
    "LazyLoggerAdapter",
    "get_lazy_logger",
]
