"""
Bounded retry executor with linear backoff.

Every network call in the pipeline (embedding requests, vector store writes,
PDF downloads, summary generation) goes through with_retry so failure
recovery is uniform: the n-th failure waits initial_delay * n seconds,
no jitter, and the last error is re-raised once retries are exhausted.

Dependencies: tenacity
System role: Shared retry policy for external calls
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_incrementing,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _log_retry(operation_name: str, max_retries: int) -> Callable[[RetryCallState], None]:
    def before_sleep(retry_state: RetryCallState) -> None:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        delay = retry_state.next_action.sleep if retry_state.next_action else 0
        logger.warning(
            f"{__name__}:with_retry - {operation_name} failed "
            f"(retry {retry_state.attempt_number}/{max_retries}), "
            f"sleeping {delay:.1f}s: {type(exc).__name__}: {exc}"
        )

    return before_sleep


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    max_retries: int = 3,
    initial_delay: float = 1.0,
    *,
    operation_name: str | None = None,
    retry_on: tuple[type[BaseException], ...] = (Exception,),
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """
    Run an async operation, retrying on failure with linearly growing delay.

    Args:
        operation: Zero-argument coroutine factory, called once per attempt
        max_retries: Retries after the first call (total calls = max_retries + 1)
        initial_delay: Delay in seconds before the first retry
        operation_name: Label used in retry logs
        retry_on: Exception types that trigger a retry
        sleep: Awaitable sleep function (injectable for tests)

    Returns:
        T: Result of the first successful call

    Raises:
        Exception: The last error raised by operation once retries are exhausted
    """
    if max_retries < 0:
        raise ValueError("max_retries must be >= 0")

    name = operation_name or getattr(operation, "__name__", "operation")
    retrying = AsyncRetrying(
        retry=retry_if_exception_type(retry_on),
        stop=stop_after_attempt(max_retries + 1),
        wait=wait_incrementing(start=initial_delay, increment=initial_delay),
        before_sleep=_log_retry(name, max_retries),
        sleep=sleep,
        reraise=True,
    )

    async def attempt() -> T:
        return await operation()

    return await retrying(attempt)
