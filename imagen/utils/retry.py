"""Retry and backoff utilities for external API calls."""
from __future__ import annotations

from functools import wraps
from typing import Any, Callable, TypeVar

from tenacity import (
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from imagen.errors import ApiError, NetworkError


# Type variable for decorated functions
F = TypeVar('F', bound=Callable[..., Any])


def is_transient(exc: BaseException) -> bool:
    """Rate limits, 5xx and transport failures are worth another attempt."""
    if isinstance(exc, NetworkError):
        return True
    return isinstance(exc, ApiError) and exc.retryable


def with_retry(func: F) -> F:
    """Decorator for async functions that call external APIs.

    Retries transient failures with exponential backoff.
    - 3 attempts max
    - 1s initial wait, 10s max wait
    - 4xx client errors are raised immediately
    """
    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        retry=retry_if_exception(is_transient),
        reraise=True,
    )
    @wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> Any:
        return await func(*args, **kwargs)

    return wrapper  # type: ignore
