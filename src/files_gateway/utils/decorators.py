"""Decorator utilities for cross-cutting concerns."""
import time
import logging
import functools
from typing import Any, Callable, Optional, TypeVar, cast

logger = logging.getLogger(__name__)

F = TypeVar('F', bound=Callable[..., Any])


def log_execution_time(func: Optional[F] = None, *, logger_name: Optional[str] = None):
    """Decorator to log function execution time.

    Usable bare (``@log_execution_time``) or with a logger name
    (``@log_execution_time(logger_name=__name__)``).

    Args:
        func: The function to decorate
        logger_name: Optional logger name (defaults to this module's logger)

    Returns:
        Decorated function that logs execution time, and failures with the
        time spent before them, then re-raises
    """
    timing_logger = logging.getLogger(logger_name) if logger_name else logger

    def decorator(inner: F) -> F:
        @functools.wraps(inner)
        def wrapper(*args, **kwargs):
            start_time = time.perf_counter()
            try:
                result = inner(*args, **kwargs)
            except Exception as e:
                duration = time.perf_counter() - start_time
                timing_logger.error("%s failed after %.3fs: %s", inner.__qualname__, duration, e)
                raise
            duration = time.perf_counter() - start_time
            timing_logger.info("%s completed in %.3fs", inner.__qualname__, duration)
            return result
        return cast(F, wrapper)

    if func is not None:
        return decorator(func)
    return decorator
