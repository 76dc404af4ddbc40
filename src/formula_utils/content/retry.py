"""Retry decorator for content API calls."""

import logging
import time
from functools import wraps
from typing import Any, Callable, Tuple, Type

import requests

logger = logging.getLogger(__name__)

# Transient failures worth another attempt; HTTP error statuses are not retried
TRANSIENT_ERRORS: Tuple[Type[BaseException], ...] = (
    requests.exceptions.ConnectionError,
    requests.exceptions.ChunkedEncodingError,
    requests.exceptions.ReadTimeout,
    ConnectionResetError,
)


def retry_on_connection_error(
    max_retries: int = 3, initial_delay: float = 1.0, backoff: float = 2.0
) -> Callable:
    """Decorator that retries a call on connection errors with exponential backoff.

    Args:
        max_retries: Maximum number of attempts
        initial_delay: Delay before the second attempt, in seconds
        backoff: Multiplier applied to the delay after each failed attempt

    Returns:
        Decorated function that retries on connection errors and re-raises
        the last one when every attempt fails

    Example:
        @retry_on_connection_error(max_retries=3, initial_delay=1.0)
        def fetch_formulas(session, url):
            return session.get(url)
    """

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            delay = initial_delay
            for attempt in range(1, max_retries + 1):
                try:
                    return func(*args, **kwargs)
                except TRANSIENT_ERRORS as e:
                    if attempt == max_retries:
                        logger.error(f"{func.__name__} failed after {max_retries} attempts: {e}")
                        raise
                    logger.warning(
                        f"Connection error on attempt {attempt}/{max_retries}: {e}. "
                        f"Retrying in {delay}s..."
                    )
                    time.sleep(delay)
                    delay *= backoff

        return wrapper

    return decorator
