"""
@trace: timing for batch-level entry points (file collection, batch runs).
"""

import functools
import time
from typing import Any, Callable

from fixforge.logging_config import logger


def trace(func: Callable) -> Callable:
    """
    Log how long `func` took, at debug level on success and error level on
    failure. The exception propagates unchanged.
    """
    name = func.__qualname__

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        started = time.perf_counter()
        try:
            result = func(*args, **kwargs)
        except Exception as e:
            elapsed = time.perf_counter() - started
            logger.bind(duration=elapsed).error(f"{name} raised {type(e).__name__} after {elapsed:.3f}s: {e}")
            raise
        elapsed = time.perf_counter() - started
        logger.bind(duration=elapsed).debug(f"{name} took {elapsed:.3f}s")
        return result

    return wrapper
