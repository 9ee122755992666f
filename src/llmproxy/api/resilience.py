"""Retry helpers for upstream calls.

Only transport-level failures are retried: a Google Custom Search request
that dies on a reset connection is worth a second try, a 400 from the API is
not.

Example:
    @retry(max_attempts=3, backoff_factor=2.0)
    async def fetch_results():
        return await client.get("/customsearch/v1", params=params)
"""
import asyncio
import logging
import random
from functools import wraps
from typing import Awaitable, Callable, Optional, TypeVar

from .exceptions import NetworkError

logger = logging.getLogger(__name__)

T = TypeVar("T")


# ============================================
# Retry with Exponential Backoff
# ============================================

# Default exceptions that are considered retryable
DEFAULT_RETRYABLE_EXCEPTIONS = (
    NetworkError,
    asyncio.TimeoutError,
    ConnectionResetError,
)


def retry(
    max_attempts: int = 3,
    backoff_factor: float = 2.0,
    initial_delay: float = 0.5,
    max_delay: float = 10.0,
    jitter: bool = True,
    retryable_exceptions: tuple = DEFAULT_RETRYABLE_EXCEPTIONS,
    on_retry: Optional[Callable[[Exception, int], None]] = None,
):
    """Decorator for retrying async functions with exponential backoff.

    Args:
        max_attempts: Maximum number of attempts (including first try)
        backoff_factor: Multiplier for delay between attempts
        initial_delay: Initial delay in seconds before first retry
        max_delay: Maximum delay in seconds between retries
        jitter: Add random jitter to spread concurrent retries
        retryable_exceptions: Tuple of exception types to retry on
        on_retry: Optional callback called before each retry with (exception, attempt)

    Returns:
        Decorator function
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @wraps(func)
        async def wrapper(*args, **kwargs) -> T:
            delay = initial_delay

            for attempt in range(1, max_attempts + 1):
                try:
                    return await func(*args, **kwargs)

                except retryable_exceptions as e:
                    if attempt >= max_attempts:
                        logger.error(
                            f"All {max_attempts} attempts of {func.__name__} failed. "
                            f"Last error: {e}"
                        )
                        raise

                    actual_delay = min(delay, max_delay)
                    if jitter:
                        actual_delay = actual_delay * (0.5 + random.random())

                    if on_retry:
                        on_retry(e, attempt)

                    logger.warning(
                        f"Attempt {attempt}/{max_attempts} of {func.__name__} failed: {e}. "
                        f"Retrying in {actual_delay:.1f}s"
                    )

                    await asyncio.sleep(actual_delay)
                    delay = min(delay * backoff_factor, max_delay)

            raise RuntimeError("Retry logic error")

        return wrapper
    return decorator
