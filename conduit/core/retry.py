"""Exponential backoff for collaborator clients talking to vendor endpoints.

Channels themselves never retry; only the clients they are handed do.
"""
from __future__ import annotations

from typing import Any, Awaitable, Callable, Type, TypeVar

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from conduit.observability.logging import get_logger

T = TypeVar("T")
log = get_logger("retry")


class RetryableError(Exception):
    """Base exception for errors that should trigger retries."""

    pass


class TransientError(RetryableError):
    """Vendor endpoint answered 5xx or the connection dropped."""

    pass


class RateLimitError(RetryableError):
    """Vendor endpoint answered 429."""

    pass


def _log_retry(state: RetryCallState) -> None:
    exc = state.outcome.exception() if state.outcome else None
    log.warning(
        "retry_failed_attempt",
        func=getattr(state.fn, "__name__", "?"),
        attempt=state.attempt_number,
        error=str(exc),
        error_type=type(exc).__name__,
    )


async def retry_async(
    func: Callable[..., Awaitable[T]],
    *args: Any,
    max_attempts: int = 3,
    min_wait: float = 0.5,
    max_wait: float = 5.0,
    retryable_exceptions: tuple[Type[Exception], ...] = (TransientError, RateLimitError),
    **kwargs: Any,
) -> T:
    """
    Await ``func(*args, **kwargs)``, retrying retryable failures with exponential backoff.

    The last exception is re-raised once ``max_attempts`` is exhausted; non
    retryable exceptions propagate immediately.
    """
    retrying = AsyncRetrying(
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(min=min_wait, max=max_wait),
        retry=retry_if_exception_type(retryable_exceptions),
        before_sleep=_log_retry,
        reraise=True,
    )
    return await retrying(func, *args, **kwargs)
