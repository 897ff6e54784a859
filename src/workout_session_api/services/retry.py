"""Retry helpers for calls to the history store, with exponential backoff."""
import logging
from typing import Any, Callable, TypeVar

from tenacity import (
    Retrying,
    before_sleep_log,
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_MIN_WAIT_SECONDS = 0.5
DEFAULT_MAX_WAIT_SECONDS = 5

_TRANSIENT_CODES = ("408", "429", "500", "502", "503", "504")
_PERMANENT_CODES = ("400", "401", "403", "404", "409", "422")
_NETWORK_HINTS = (
    "timeout",
    "timed out",
    "connection",
    "temporary failure in name resolution",
    "name or service not known",
    "server disconnected",
)


def is_retryable_error(exception: BaseException) -> bool:
    """
    Decide whether a failed insert is worth another attempt.

    Transient: rate limits, 5xx responses, timeouts and dropped connections.
    Permanent: bad requests, auth failures, constraint violations; these win
    when a message carries both kinds of marker. Unknown errors are not retried.
    """
    error_str = str(exception).lower()
    exception_type = type(exception).__name__.lower()

    if any(code in error_str for code in _PERMANENT_CODES):
        return False
    if "violates" in error_str or "duplicate" in error_str:
        return False

    if "rate" in error_str and "limit" in error_str:
        return True
    if any(code in error_str for code in _TRANSIENT_CODES):
        return True
    if "timeout" in exception_type or "connect" in exception_type:
        return True
    if any(hint in error_str for hint in _NETWORK_HINTS):
        return True

    return False


def create_retry_decorator(
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    min_wait_seconds: float = DEFAULT_MIN_WAIT_SECONDS,
    max_wait_seconds: float = DEFAULT_MAX_WAIT_SECONDS,
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Retry decorator that only retries transient errors and re-raises the last one."""
    return retry(
        retry=retry_if_exception(is_retryable_error),
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(multiplier=min_wait_seconds, min=min_wait_seconds, max=max_wait_seconds),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )


def retry_sync_call(
    func: Callable[..., T],
    *args: Any,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    min_wait_seconds: float = DEFAULT_MIN_WAIT_SECONDS,
    max_wait_seconds: float = DEFAULT_MAX_WAIT_SECONDS,
    **kwargs: Any,
) -> T:
    """
    Execute a sync function with retry logic.

    Args:
        func: Function to execute
        *args: Positional arguments for the function
        max_attempts: Maximum number of attempts, the first one included
        min_wait_seconds: Wait before the first retry
        max_wait_seconds: Upper bound for the backoff
        **kwargs: Keyword arguments for the function

    Returns:
        Result of the function call

    Raises:
        Exception: The last error once attempts run out, or the first
            non-retryable error.
    """
    retrying = Retrying(
        retry=retry_if_exception(is_retryable_error),
        stop=stop_after_attempt(max(1, max_attempts)),
        wait=wait_exponential(multiplier=min_wait_seconds, min=min_wait_seconds, max=max_wait_seconds),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    return retrying(func, *args, **kwargs)
