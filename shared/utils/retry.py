"""Retry decorator with exponential backoff."""

import functools
import logging
import random
import time
from typing import Callable, Optional, Tuple, Type

logger = logging.getLogger(__name__)


def _retry_after_seconds(error: Exception) -> Optional[float]:
    """Read a Retry-After header from an HTTP 429 error, if there is one."""
    response = getattr(error, "response", None)
    if response is None or getattr(response, "status_code", None) != 429:
        return None
    value = response.headers.get("Retry-After")
    try:
        return float(value) if value is not None else None
    except (TypeError, ValueError):
        return None


def retry_with_backoff(
    max_retries: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 60.0,
    exceptions: Tuple[Type[Exception], ...] = (Exception,),
) -> Callable:
    """
    Retry a function with exponential backoff and jitter.

    HTTP 429 responses honour the server's Retry-After header.

    Args:
        max_retries: Retries after the first attempt
        base_delay: Delay before the first retry, doubled each time
        max_delay: Upper bound for any single delay
        exceptions: Exception types that trigger a retry

    Returns:
        Decorator
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            for attempt in range(max_retries + 1):
                try:
                    return func(*args, **kwargs)
                except exceptions as e:
                    if attempt == max_retries:
                        logger.error(f"{func.__name__} failed after {max_retries + 1} attempts: {e}")
                        raise

                    delay = _retry_after_seconds(e)
                    if delay is None:
                        delay = base_delay * (2 ** attempt) + random.uniform(0, 1)
                    delay = min(delay, max_delay)

                    logger.warning(
                        f"{func.__name__} attempt {attempt + 1} failed: {e}. "
                        f"Retrying in {delay:.1f}s..."
                    )
                    time.sleep(delay)
        return wrapper
    return decorator
