"""
Retry and fallback utilities.

This module provides retry logic for transient failures of external calls and
the tagged ``Attempt`` result used to express two-tier fallback chains
(semantic strategy first, deterministic strategy second) as plain values.
"""

import asyncio
import logging
import random
from dataclasses import dataclass
from functools import wraps
from typing import Any, Awaitable, Callable, Generic, Optional, Tuple, Type, TypeVar

from .exceptions import LookupNetworkError, ScreenSortError

T = TypeVar('T')

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Tagged results
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Attempt(Generic[T]):
    """Outcome of one strategy: either a value or the error it failed with."""

    value: Optional[T] = None
    error: Optional[BaseException] = None
    strategy: str = ""

    @classmethod
    def succeeded(cls, value: T, strategy: str = "") -> "Attempt[T]":
        return cls(value=value, strategy=strategy)

    @classmethod
    def failed(cls, error: BaseException, strategy: str = "") -> "Attempt[T]":
        return cls(error=error, strategy=strategy)

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        """Return the value or raise the captured error unchanged."""
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]


async def attempt_async(
    func: Callable[..., Awaitable[T]],
    *args: Any,
    strategy: str = "",
    capture: Tuple[Type[BaseException], ...] = (ScreenSortError,),
    **kwargs: Any,
) -> Attempt[T]:
    """
    Await ``func`` and wrap its result in an Attempt.

    Only exceptions listed in ``capture`` are turned into failed attempts;
    anything else propagates, so programming errors are never mistaken for a
    strategy failure.
    """
    try:
        return Attempt.succeeded(await func(*args, **kwargs), strategy)
    except capture as e:
        return Attempt.failed(e, strategy)


def attempt_sync(
    func: Callable[..., T],
    *args: Any,
    strategy: str = "",
    capture: Tuple[Type[BaseException], ...] = (ScreenSortError,),
    **kwargs: Any,
) -> Attempt[T]:
    """Synchronous counterpart of :func:`attempt_async`."""
    try:
        return Attempt.succeeded(func(*args, **kwargs), strategy)
    except capture as e:
        return Attempt.failed(e, strategy)


def resolve_with_fallback(
    primary: Attempt[T],
    should_fall_back: Callable[[Attempt[T]], bool],
    fallback: Callable[[], Attempt[T]],
) -> Attempt[T]:
    """
    Compose a two-tier strategy.

    Args:
        primary: Result of the preferred strategy
        should_fall_back: Decides, from the primary result alone, whether to switch
        fallback: Produces the secondary result; only called when switching

    Returns:
        ``primary`` unchanged, or the fallback's result
    """
    if not should_fall_back(primary):
        return primary
    logger.info(
        f"Falling back from '{primary.strategy or 'primary'}' "
        f"({type(primary.error).__name__ if primary.error else 'rejected result'})"
    )
    return fallback()


# ---------------------------------------------------------------------------
# Retries
# ---------------------------------------------------------------------------

class RetryConfig:
    """Configuration for retry behavior."""

    def __init__(
        self,
        max_attempts: int = 3,
        initial_delay: float = 1.0,
        max_delay: float = 30.0,
        backoff_factor: float = 2.0,
        jitter: bool = True,
        retryable_exceptions: Optional[tuple] = None
    ):
        """
        Initialize retry configuration.

        Args:
            max_attempts: Maximum number of attempts, including the first
            initial_delay: Initial delay between retries in seconds
            max_delay: Maximum delay between retries in seconds
            backoff_factor: Exponential backoff multiplier
            jitter: Whether to add random jitter to delays
            retryable_exceptions: Tuple of exception types that should be retried
        """
        self.max_attempts = max_attempts
        self.initial_delay = initial_delay
        self.max_delay = max_delay
        self.backoff_factor = backoff_factor
        self.jitter = jitter

        if retryable_exceptions is None:
            self.retryable_exceptions = (
                LookupNetworkError,
                ConnectionError,
                TimeoutError,
            )
        else:
            self.retryable_exceptions = retryable_exceptions


def is_retryable_exception(exception: BaseException, retryable_exceptions: tuple) -> bool:
    """Check if an exception should trigger a retry."""
    return isinstance(exception, retryable_exceptions)


def calculate_delay(attempt: int, config: RetryConfig) -> float:
    """Calculate delay for the given attempt number."""
    delay = config.initial_delay * (config.backoff_factor ** (attempt - 1))
    delay = min(delay, config.max_delay)

    if config.jitter:
        # Add up to 25% jitter
        delay += delay * 0.25 * random.random()

    return delay


def retry_async_with_config(
    config: RetryConfig,
    logger: Optional[logging.Logger] = None
) -> Callable:
    """
    Decorator that adds retry logic for async functions with custom configuration.

    Args:
        config: Retry configuration
        logger: Optional logger for retry attempts

    Returns:
        Decorated async function
    """
    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @wraps(func)
        async def wrapper(*args, **kwargs) -> T:
            for attempt in range(1, config.max_attempts + 1):
                try:
                    return await func(*args, **kwargs)
                except Exception as e:
                    if not is_retryable_exception(e, config.retryable_exceptions):
                        raise

                    if attempt == config.max_attempts:
                        if logger:
                            logger.error(
                                f"Async operation failed after {config.max_attempts} attempts: {e}"
                            )
                        raise

                    delay = calculate_delay(attempt, config)
                    if logger:
                        logger.warning(
                            f"Async attempt {attempt} failed: {e}. Retrying in {delay:.2f}s..."
                        )

                    await asyncio.sleep(delay)

            raise RuntimeError("retry loop exited without a result")

        return wrapper
    return decorator


def retry_lookup_call(max_attempts: int = 3, logger: Optional[logging.Logger] = None):
    """Decorator for retrying metadata lookup calls on transient network failures."""
    config = RetryConfig(
        max_attempts=max_attempts,
        initial_delay=1.0,
        max_delay=15.0,
        backoff_factor=2.0,
        retryable_exceptions=(LookupNetworkError, ConnectionError, TimeoutError)
    )
    return retry_async_with_config(config, logger)
