"""
Utility functions for autoshadow.

Shared helpers for log formatting and retrying flaky network calls.
"""

import functools
import logging
import random
import time
from typing import Callable, Tuple, Type

logger = logging.getLogger(__name__)


def truncate_str(text: str, length: int) -> str:
    """
    Truncate a string to at most ``length`` characters.

    Strings that are too long are cut short and end in ``...`` so the result
    is still exactly ``length`` characters.

    Args:
        text: The string to truncate
        length: Maximum number of characters in the result

    Returns:
        str: The original string, or a truncated copy ending in '...'

    Examples:
        >>> truncate_str("hello", 10)
        'hello'
        >>> truncate_str("hello world", 8)
        'hello...'
    """
    if len(text) <= length:
        return text
    return text[:max(length - 3, 0)] + "..."


def exponential_backoff_retry(
    max_retries: int = 3,
    initial_delay: float = 1.0,
    backoff_factor: float = 2.0,
    exceptions: Tuple[Type[Exception], ...] = (Exception,),
    jitter: bool = True,
) -> Callable:
    """
    Decorator that retries a function with exponential backoff.

    Args:
        max_retries: Maximum number of retry attempts (default: 3)
        initial_delay: Initial delay in seconds before first retry (default: 1.0)
        backoff_factor: Multiplier for exponential backoff (default: 2.0)
        exceptions: Tuple of exception types to retry on (default: (Exception,))
        jitter: Whether to add random jitter to delays (default: True)

    Returns:
        Decorated function with retry logic
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            for attempt in range(max_retries + 1):  # +1 for initial attempt
                try:
                    return func(*args, **kwargs)
                except exceptions as e:
                    if attempt == max_retries:
                        logger.error(f"{func.__name__} failed after {max_retries + 1} attempts: {e}")
                        raise

                    delay = initial_delay * (backoff_factor ** attempt)
                    if jitter:
                        delay += random.uniform(0, min(1.0, delay * 0.1))

                    logger.info(f"{func.__name__} attempt {attempt + 1} failed ({e}), retrying in {delay:.1f}s...")
                    time.sleep(delay)

        return wrapper
    return decorator


def api_retry(max_retries: int = 3, initial_delay: float = 0.7) -> Callable:
    """
    Convenience decorator for Reddit API calls: 0.7s -> 1.4s -> 2.8s.

    Only transient transport errors are retried; authentication and
    not-found errors surface immediately.
    """
    import prawcore
    import requests

    api_exceptions = (
        requests.exceptions.ConnectionError,
        requests.exceptions.Timeout,
        prawcore.exceptions.RequestException,
        prawcore.exceptions.ServerError,
    )

    return exponential_backoff_retry(
        max_retries=max_retries,
        initial_delay=initial_delay,
        backoff_factor=2.0,
        exceptions=api_exceptions,
        jitter=True,
    )
