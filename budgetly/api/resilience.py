"""Error classification and retry helpers for callers of the API layer.

The transport never retries. Code above the core (screens, background
refreshes) uses these helpers to decide whether to retry, fall back to
cached data, or show field errors.
"""

import asyncio
import logging
from enum import Enum
from functools import wraps
from typing import Awaitable, Callable, Optional, TypeVar

from budgetly.api.errors import (
    ApiError,
    ForbiddenError,
    NotFoundError,
    NotInitializedError,
    RateLimitedError,
    ServerError,
    UnauthorizedError,
    UnknownStatusError,
    UnreachableError,
    ValidationFailedError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ErrorCategory(Enum):
    """Classification of API errors for retry decisions."""

    TRANSIENT = "transient"  # Offline, timeouts, throttling, 5xx - safe to retry
    VALIDATION = "validation"  # 422 - show field errors
    PERMANENT = "permanent"  # Auth, not found, local faults - don't retry


def classify_error(exception: BaseException) -> ErrorCategory:
    """Classify an exception to determine retry behavior.

    Args:
        exception: The exception to classify

    Returns:
        ErrorCategory for the exception
    """
    if isinstance(exception, ValidationFailedError):
        return ErrorCategory.VALIDATION
    if isinstance(exception, (UnreachableError, RateLimitedError, ServerError)):
        return ErrorCategory.TRANSIENT
    if isinstance(exception, UnknownStatusError):
        status = exception.status_code or 0
        return ErrorCategory.TRANSIENT if status >= 500 else ErrorCategory.PERMANENT
    return ErrorCategory.PERMANENT


def is_offline_error(exception: BaseException) -> bool:
    """True when the caller should fall back to cached data."""
    return isinstance(exception, UnreachableError)


def get_user_message(exception: BaseException) -> str:
    """Get a user-friendly error message for an exception.

    Args:
        exception: The exception to describe

    Returns:
        Human-readable error message
    """
    if isinstance(exception, NotInitializedError):
        return "Please connect to your Firefly III instance first."
    if isinstance(exception, UnreachableError):
        return (
            "Unable to connect to the server. "
            "Showing saved data where available."
        )
    if isinstance(exception, UnauthorizedError):
        return (
            "Authentication failed. "
            "Please check your Personal Access Token in Settings."
        )
    if isinstance(exception, (ForbiddenError, NotFoundError, ValidationFailedError)):
        return exception.message
    if isinstance(exception, RateLimitedError):
        return "Server is busy. Please wait a moment and try again."
    if isinstance(exception, ApiError):
        return f"{exception.message} Please try again."
    return "A temporary error occurred. Please try again."


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    max_retries: int = 2,
    initial_delay: float = 1.0,
    max_delay: float = 30.0,
    backoff_factor: float = 2.0,
    on_retry: Optional[Callable[[int, float, Exception], None]] = None,
) -> T:
    """Execute an async operation with exponential backoff retry.

    Only TRANSIENT errors are retried; anything else is raised immediately.

    Args:
        operation: Async callable to execute
        max_retries: Maximum number of retry attempts (default: 2)
        initial_delay: Initial delay between retries in seconds (default: 1.0)
        max_delay: Maximum delay between retries in seconds (default: 30.0)
        backoff_factor: Multiplier for delay after each retry (default: 2.0)
        on_retry: Optional callback(attempt, delay, error) called before each retry

    Returns:
        Result of the operation

    Raises:
        Exception: The last exception if all retries fail, or immediately
                   for non-transient errors
    """
    delay = initial_delay

    for attempt in range(max_retries + 1):
        try:
            return await operation()
        except Exception as e:
            if classify_error(e) != ErrorCategory.TRANSIENT:
                raise

            if attempt >= max_retries:
                logger.error(f"Max retries ({max_retries}) exceeded: {e}")
                raise

            logger.warning(
                f"Transient error (attempt {attempt + 1}/{max_retries + 1}), "
                f"retrying in {delay:.1f}s: {e}"
            )

            if on_retry:
                on_retry(attempt + 1, delay, e)

            await asyncio.sleep(delay)
            delay = min(delay * backoff_factor, max_delay)

    raise RuntimeError("Retry loop completed without result or exception")


def retry_on_transient(
    max_retries: int = 2,
    initial_delay: float = 1.0,
    max_delay: float = 30.0,
):
    """Decorator to add retry logic to async functions.

    Args:
        max_retries: Maximum retry attempts
        initial_delay: Initial delay between retries
        max_delay: Maximum delay between retries

    Returns:
        Decorated function with retry logic
    """
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        async def wrapper(*args, **kwargs):
            return await with_retry(
                lambda: func(*args, **kwargs),
                max_retries=max_retries,
                initial_delay=initial_delay,
                max_delay=max_delay,
            )
        return wrapper
    return decorator
