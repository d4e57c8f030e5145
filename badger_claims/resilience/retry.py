"""Retry logic with exponential backoff and jitter

Used for calls to external providers (weather lookups):
1. Only transient errors are retried (timeouts, rate limits, 5xx responses)
2. Exponential backoff with jitter spreads concurrent retries
3. Retries are bounded so a claim request never waits indefinitely
"""

import asyncio
import random
import logging
from typing import Awaitable, Callable, Any, TypeVar
from functools import wraps
import httpx

logger = logging.getLogger(__name__)

T = TypeVar('T')

# Retry configuration (claim requests are interactive, keep this short)
MAX_RETRIES = 2
BASE_DELAY = 0.25  # seconds
MAX_DELAY = 2.0  # seconds
JITTER = 0.1  # 10% random jitter

RETRYABLE_STATUS_CODES = (429, 500, 502, 503, 504)


def is_retryable_error(exc: Exception) -> bool:
    """
    Determine if error is transient and should be retried.

    Retryable errors:
    - Network timeouts and connection failures
    - HTTP 429 (rate limit)
    - HTTP 500/502/503/504 (server errors)

    Non-retryable errors:
    - HTTP 400/401/403/404 (client errors, e.g. a bad API key)
    - Anything that is not an httpx error
    """
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code in RETRYABLE_STATUS_CODES

    if isinstance(exc, (httpx.TimeoutException, httpx.ConnectError, httpx.RemoteProtocolError)):
        return True

    return False


def calculate_backoff(attempt: int) -> float:
    """
    Calculate exponential backoff delay with jitter.

    Formula: delay = min(BASE_DELAY * (2 ** attempt), MAX_DELAY) + jitter

    Args:
        attempt: The retry attempt number (0-indexed)

    Returns:
        Delay in seconds, never negative
    """
    delay = min(BASE_DELAY * (2 ** attempt), MAX_DELAY)
    jitter_amount = random.uniform(-JITTER * delay, JITTER * delay)
    return max(delay + jitter_amount, 0.0)


async def retry_with_backoff(
    func: Callable[..., Awaitable[T]],
    *args: Any,
    max_retries: int = MAX_RETRIES,
    **kwargs: Any
) -> T:
    """
    Retry async function with exponential backoff.

    Args:
        func: Async function to retry
        max_retries: Maximum number of retry attempts
        *args, **kwargs: Arguments to pass to func

    Returns:
        Result from func

    Raises:
        Last exception if all retries exhausted or non-retryable error
    """
    for attempt in range(max_retries + 1):
        try:
            return await func(*args, **kwargs)

        except Exception as e:
            if attempt == max_retries:
                logger.error(
                    f"[RETRY] All {max_retries} retries exhausted for {func.__name__}"
                )
                raise

            if not is_retryable_error(e):
                logger.warning(
                    f"[RETRY] Non-retryable error for {func.__name__}: "
                    f"{type(e).__name__}: {e}"
                )
                raise

            backoff = calculate_backoff(attempt)

            from badger_claims.monitoring.prometheus_metrics import track_retry
            track_retry(func.__name__)

            logger.info(
                f"[RETRY] Attempt {attempt + 1}/{max_retries} for {func.__name__} "
                f"after {backoff:.2f}s (error: {type(e).__name__})"
            )
            await asyncio.sleep(backoff)

    raise RuntimeError("Retry logic failed unexpectedly")


def with_retry(max_retries: int = MAX_RETRIES) -> Callable:
    """
    Decorator to add retry logic to async functions.

    Example:
        @with_retry(max_retries=2)
        async def fetch_conditions():
            ...
    """
    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            return await retry_with_backoff(func, *args, max_retries=max_retries, **kwargs)
        return wrapper
    return decorator
