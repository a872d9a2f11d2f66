"""Retry wrapper for the completion pipeline (powered by tenacity).

The whole pipeline is re-run on failure: every attempt re-parses the request,
re-fetches any reference image, and re-invokes the backend. Nothing is cached
between attempts.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

logger = logging.getLogger(__name__)

_T = TypeVar("_T")


@dataclass(slots=True, frozen=True)
class RetryPolicy:
    """Bounded fixed-delay retry policy.

    Attributes:
        max_retries: Retries allowed after the first attempt (MAX_RETRY_COUNT).
        delay_seconds: Delay between attempts (RETRY_DELAY).
    """

    max_retries: int = 0
    delay_seconds: float = 5.0

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        if self.delay_seconds < 0:
            raise ValueError("delay_seconds must be >= 0")


def _log_before_retry(delay_seconds: float, operation_name: str) -> Callable[[RetryCallState], None]:
    def _before_sleep(retry_state: RetryCallState) -> None:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        logger.error(
            "%s_attempt_failed: attempt=%s, error=%s",
            operation_name,
            retry_state.attempt_number,
            exc,
            exc_info=exc,
        )
        logger.warning("Try again after %ss...", delay_seconds)

    return _before_sleep


async def retry_async(
    operation: Callable[[], Awaitable[_T]],
    *,
    policy: RetryPolicy,
    retry_count: int = 0,
    operation_name: str = "completion",
) -> _T:
    """Await ``operation`` until it succeeds or the retry bound is reached.

    Args:
        operation: Zero-argument coroutine factory; invoked once per attempt.
        policy: Retry bound and delay.
        retry_count: Retries already consumed by the caller. The operation runs
            at most ``policy.max_retries - retry_count + 1`` times (at least once).
        operation_name: Prefix for log messages.

    Returns:
        The first successful result.

    Raises:
        Exception: The last failure, unchanged, once attempts are exhausted.
    """
    remaining = max(policy.max_retries - retry_count, 0)
    retrying = AsyncRetrying(
        stop=stop_after_attempt(remaining + 1),
        wait=wait_fixed(policy.delay_seconds),
        retry=retry_if_exception_type(Exception),
        before_sleep=_log_before_retry(policy.delay_seconds, operation_name),
        reraise=True,
    )
    async for attempt in retrying:
        with attempt:
            result = await operation()
    return result


__all__ = ["RetryPolicy", "retry_async"]
