"""Retry logic with exponential backoff for rate-limited remote calls."""

import logging
import re
import time
from collections.abc import Callable
from functools import wraps
from typing import Any, TypeVar

import ccxt
import httpx

from wallet_accumulator.errors import RateLimitError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# "429" must stand alone so that hex data or addresses containing the digits do not match
RATE_LIMIT_PATTERN = re.compile(r"\b429\b|too many requests", re.IGNORECASE)


class RetryConfig:
    """
    Configuration for retry behavior.

    Parameters
    ----------
    max_retries : int
        Maximum number of retry attempts after the first call
    base_delay : float
        Initial delay in seconds before first retry
    max_delay : float
        Maximum delay between retries
    exponential_base : float
        Base for exponential backoff calculation

    """

    def __init__(
        self,
        max_retries: int = 5,
        base_delay: float = 1.0,
        max_delay: float = 30.0,
        exponential_base: float = 2.0,
    ) -> None:
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.exponential_base = exponential_base

    def get_delay(self, attempt: int) -> float:
        """
        Calculate delay for a given retry attempt using exponential backoff.

        Parameters
        ----------
        attempt : int
            Current attempt number (0-indexed)

        Returns
        -------
        float
            Delay in seconds

        """
        delay = self.base_delay * (self.exponential_base**attempt)
        return min(delay, self.max_delay)


def is_rate_limited(exc: BaseException) -> bool:
    """
    Check whether a failure is a rate-limit signal from the remote side.

    Parameters
    ----------
    exc : BaseException
        Failure raised by a remote call

    Returns
    -------
    bool
        True if the call may be retried after backing off

    """
    if isinstance(exc, RateLimitError):
        return True
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code == 429
    if isinstance(exc, (ccxt.RateLimitExceeded, ccxt.DDoSProtection)):
        return True
    return RATE_LIMIT_PATTERN.search(str(exc)) is not None


def call_with_retry(
    func: Callable[[], T],
    config: RetryConfig | None = None,
    *,
    is_retryable: Callable[[BaseException], bool] = is_rate_limited,
    sleep: Callable[[float], None] = time.sleep,
    label: str = "",
) -> T:
    """
    Invoke ``func`` and retry it with exponential backoff on rate-limit failures.

    Non-retryable failures propagate immediately. When all attempts are used,
    the last failure propagates.

    Parameters
    ----------
    func : Callable[[], T]
        Zero-argument callable performing one remote call
    config : RetryConfig | None
        Retry configuration. Uses default config if None.
    is_retryable : Callable[[BaseException], bool]
        Predicate selecting failures worth retrying
    sleep : Callable[[float], None]
        Sleep function, only blocks the calling thread
    label : str
        Name of the call for log messages

    Returns
    -------
    T
        Result of ``func``

    """
    if config is None:
        config = RetryConfig()

    for attempt in range(config.max_retries + 1):
        try:
            return func()
        except Exception as e:
            if not is_retryable(e) or attempt == config.max_retries:
                raise

            delay = config.get_delay(attempt)
            logger.warning(
                "Rate limited%s (attempt %d/%d), retrying in %.1fs",
                f" on {label}" if label else "",
                attempt + 1,
                config.max_retries + 1,
                delay,
            )
            sleep(delay)

    msg = "max_retries must not be negative"
    raise ValueError(msg)


def with_retry(
    config: RetryConfig | None = None,
    *,
    is_retryable: Callable[[BaseException], bool] = is_rate_limited,
    sleep: Callable[[float], None] = time.sleep,
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """
    Decorator to add rate-limit retry with exponential backoff to a function.

    Parameters
    ----------
    config : RetryConfig | None
        Retry configuration. Uses default config if None.
    is_retryable : Callable[[BaseException], bool]
        Predicate selecting failures worth retrying
    sleep : Callable[[float], None]
        Sleep function

    Returns
    -------
    Callable
        Decorated function with retry logic

    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            return call_with_retry(
                lambda: func(*args, **kwargs),
                config,
                is_retryable=is_retryable,
                sleep=sleep,
                label=func.__name__,
            )

        return wrapper

    return decorator
