"""
Retry utilities with exponential backoff for resilient API calls.

Used by the candle fetcher for transient failures:
- Network timeouts and dropped connections
- Rate limiting (HTTP 429)
- Temporary server errors (HTTP 5xx)
"""

import asyncio
import functools
import logging
import random
from typing import Any, Callable, Optional, Tuple, Type, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RetryError(Exception):
    """Raised when retry attempts are exhausted."""

    def __init__(self, message: str, last_exception: Optional[Exception]):
        super().__init__(message)
        self.last_exception = last_exception


class ExponentialBackoff:
    """
    Exponential backoff calculator with jitter.

    Args:
        base: Base delay in seconds (default: 1.0)
        multiplier: Exponential growth factor (default: 2.0)
        max_delay: Maximum delay cap in seconds (default: 60.0)
        jitter: Add up to +/-25% random jitter (default: True)

    Example:
        >>> backoff = ExponentialBackoff(base=1.0, multiplier=2.0, jitter=False)
        >>> backoff.calculate(attempt=0)
        1.0
        >>> backoff.calculate(attempt=2)
        4.0
    """

    def __init__(
        self,
        base: float = 1.0,
        multiplier: float = 2.0,
        max_delay: float = 60.0,
        jitter: bool = True,
    ):
        self.base = base
        self.multiplier = multiplier
        self.max_delay = max_delay
        self.jitter = jitter

    def calculate(self, attempt: int) -> float:
        """Delay in seconds before retry number `attempt` (0-indexed)."""
        delay = min(self.base * (self.multiplier**attempt), self.max_delay)

        if self.jitter:
            jitter_amount = delay * 0.25
            delay += random.uniform(-jitter_amount, jitter_amount)

        return max(0.0, delay)


def retry_async(
    max_attempts: int = 3,
    exceptions: Tuple[Type[Exception], ...] = (Exception,),
    base_delay: float = 1.0,
    multiplier: float = 2.0,
    max_delay: float = 60.0,
    jitter: bool = True,
    on_retry: Optional[Callable[[Exception, int], None]] = None,
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """
    Decorator for async functions with exponential backoff retry.

    Only `exceptions` are retried; anything else propagates on the first
    failure. After `max_attempts` failures a RetryError carrying the last
    exception is raised.

    Example:
        >>> @retry_async(max_attempts=3, exceptions=(aiohttp.ClientError,))
        ... async def fetch_data():
        ...     async with session.get("/data") as resp:
        ...         return await resp.json()
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be >= 1")

    backoff = ExponentialBackoff(base_delay, multiplier, max_delay, jitter)

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            last_exception: Optional[Exception] = None

            for attempt in range(max_attempts):
                try:
                    return await func(*args, **kwargs)
                except exceptions as e:
                    last_exception = e
                    logger.warning(
                        "Attempt %d/%d failed for %s: %s",
                        attempt + 1,
                        max_attempts,
                        func.__name__,
                        e,
                    )

                    if on_retry:
                        on_retry(e, attempt)

                    if attempt < max_attempts - 1:
                        delay = backoff.calculate(attempt)
                        logger.info("Retrying in %.2f seconds...", delay)
                        await asyncio.sleep(delay)

            error_msg = (
                f"{func.__name__} failed after {max_attempts} attempts. "
                f"Last error: {last_exception}"
            )
            logger.error(error_msg)
            raise RetryError(error_msg, last_exception)

        return wrapper

    return decorator
