"""
Retry Utility - Retry with exponential backoff at the collaborator boundary

@file_name: retry.py
@author: NetMind.AI
@date: 2026-03-02
@description: Automatic retry for transient Model Client failures

=============================================================================
Scope
=============================================================================

The run loop itself never retries a model call; retries belong to the
collaborator boundary. This decorator is applied inside concrete ModelClient
adapters (e.g. OpenAIChatModelClient) to absorb:
- Network timeouts / dropped connections
- Rate limiting and 5xx responses from the provider

Usage example:
    @with_retry(max_attempts=3, exceptions=(APIConnectionError, RateLimitError))
    async def _create_completion(self, **kwargs):
        ...

=============================================================================
"""

from __future__ import annotations

import asyncio
import inspect
import time
from functools import wraps
from typing import (
    Any,
    Callable,
    Optional,
    Tuple,
    Type,
    TypeVar,
    Union,
)
from loguru import logger


# =============================================================================
# Type Definitions
# =============================================================================

T = TypeVar('T')
ExceptionTypes = Union[Type[BaseException], Tuple[Type[BaseException], ...]]


# =============================================================================
# Default Configuration
# =============================================================================

DEFAULT_RETRYABLE_EXCEPTIONS: Tuple[Type[Exception], ...] = (
    ConnectionError,
    TimeoutError,
    asyncio.TimeoutError,
)


def compute_backoff(attempt: int, delay: float, backoff: float, max_delay: float) -> float:
    """
    Wait time before the next attempt (attempt is 1-based)

    Example:
        >>> compute_backoff(1, 1.0, 2.0, 60.0)
        1.0
        >>> compute_backoff(3, 1.0, 2.0, 60.0)
        4.0
    """
    return min(delay * (backoff ** (attempt - 1)), max_delay)


# =============================================================================
# Retry Decorator
# =============================================================================

def with_retry(
    max_attempts: int = 3,
    delay: float = 1.0,
    backoff: float = 2.0,
    max_delay: float = 30.0,
    exceptions: ExceptionTypes = DEFAULT_RETRYABLE_EXCEPTIONS,
    retry_if: Optional[Callable[[BaseException], bool]] = None,
    on_retry: Optional[Callable[[BaseException, int], None]] = None,
):
    """
    Retry decorator with exponential backoff

    Args:
        max_attempts: Maximum number of attempts (including the first attempt)
        delay: Initial delay in seconds
        backoff: Backoff multiplier
        max_delay: Upper bound for a single wait
        exceptions: Exception types eligible for retry
        retry_if: Extra predicate; an eligible exception is only retried when it returns True
        on_retry: Callback receiving (exception, attempt) before each wait

    Returns:
        The decorated function (async or sync, matching the wrapped function)
    """
    def _should_retry(exc: BaseException, attempt: int) -> bool:
        if attempt >= max_attempts:
            return False
        return retry_if is None or retry_if(exc)

    def _before_wait(func_name: str, exc: BaseException, attempt: int) -> float:
        wait_time = compute_backoff(attempt, delay, backoff, max_delay)
        logger.warning(
            f"Retry {attempt}/{max_attempts} for {func_name}: {exc}. "
            f"Waiting {wait_time:.2f}s before next attempt."
        )
        if on_retry:
            on_retry(exc, attempt)
        return wait_time

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        async def async_wrapper(*args: Any, **kwargs: Any) -> T:
            attempt = 0
            while True:
                attempt += 1
                try:
                    return await func(*args, **kwargs)
                except exceptions as e:
                    if not _should_retry(e, attempt):
                        if attempt > 1:
                            logger.error(f"All {attempt} attempts failed for {func.__name__}: {e}")
                        raise
                    await asyncio.sleep(_before_wait(func.__name__, e, attempt))

        @wraps(func)
        def sync_wrapper(*args: Any, **kwargs: Any) -> T:
            attempt = 0
            while True:
                attempt += 1
                try:
                    return func(*args, **kwargs)
                except exceptions as e:
                    if not _should_retry(e, attempt):
                        if attempt > 1:
                            logger.error(f"All {attempt} attempts failed for {func.__name__}: {e}")
                        raise
                    time.sleep(_before_wait(func.__name__, e, attempt))

        if inspect.iscoroutinefunction(func):
            return async_wrapper  # type: ignore
        return sync_wrapper  # type: ignore

    return decorator
