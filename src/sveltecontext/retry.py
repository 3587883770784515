"""Bounded retry with exponential backoff for remote calls.

The policy is asymmetric. A definitive absence (NOT_FOUND) or an exhausted
quota (RateLimitError) is raised on the first occurrence since another
attempt in the same window cannot succeed. Every other failure is treated as
transient and retried with a doubling delay until attempts run out.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import TYPE_CHECKING, TypeVar

import structlog

from sveltecontext.errors import ErrorCode, RateLimitError, SvelteContextError

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

log = structlog.get_logger()

T = TypeVar("T")

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_INITIAL_DELAY_SECONDS = 1.0


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    initial_delay: float = DEFAULT_INITIAL_DELAY_SECONDS


def is_definitive(exc: BaseException) -> bool:
    """True for failures that another attempt cannot change."""
    if isinstance(exc, RateLimitError):
        return True
    return isinstance(exc, SvelteContextError) and exc.code == ErrorCode.NOT_FOUND


async def fetch_with_retry(
    thunk: Callable[[], Awaitable[T]],
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    initial_delay: float = DEFAULT_INITIAL_DELAY_SECONDS,
    *,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """Await ``thunk()`` until it succeeds, fails definitively, or attempts run out."""
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    delay = initial_delay
    for attempt in range(1, max_attempts + 1):
        try:
            return await thunk()
        except Exception as exc:
            if is_definitive(exc):
                raise
            if attempt == max_attempts:
                log.warning("fetch_retries_exhausted", attempts=attempt, error=str(exc))
                raise
            log.warning("fetch_retry", attempt=attempt, delay_seconds=delay, error=str(exc))
            await sleep(delay)
            delay *= 2

    # Unreachable but satisfies the type checker
    raise AssertionError("retry loop exited without returning")


async def fetch_with_policy(thunk: Callable[[], Awaitable[T]], policy: RetryPolicy) -> T:
    return await fetch_with_retry(
        thunk,
        max_attempts=policy.max_attempts,
        initial_delay=policy.initial_delay,
    )
