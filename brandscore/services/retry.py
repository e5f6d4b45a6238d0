"""
Bounded retry for provider calls.

A RetryPolicy decides, per failed attempt, how long to wait before the next
one (or that there should be no next one). The call itself receives the
attempt number, so a caller can change what it sends on a retry (e.g. drop
an API key).
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

Sleep = Callable[[float], Awaitable[None]]
# (error, attempt that failed) -> seconds to wait, or None to stop retrying
Backoff = Callable[[BaseException, int], Optional[float]]


def fixed_delay(seconds: float) -> Backoff:
    def _backoff(error: BaseException, attempt: int) -> Optional[float]:
        return seconds
    return _backoff


@dataclass(frozen=True)
class RetryPolicy:
    """Configuration for retry behavior."""

    max_attempts: int
    backoff: Backoff
    retry_on: tuple = (Exception,)
    name: str = "call"


async def run_with_retry(
    call: Callable[[int], Awaitable[T]],
    policy: RetryPolicy,
    sleep: Sleep = asyncio.sleep,
) -> T:
    """
    Run `call(attempt)` for attempt = 1..max_attempts, strictly sequentially.
    Re-raises the last error once the budget is spent or the backoff says stop.
    """
    if policy.max_attempts < 1:
        raise ValueError("max_attempts must be >= 1")

    attempt = 1
    while True:
        try:
            return await call(attempt)
        except policy.retry_on as e:
            if attempt >= policy.max_attempts:
                logger.warning(f"{policy.name} failed on final attempt {attempt}/{policy.max_attempts}: {e}")
                raise
            delay = policy.backoff(e, attempt)
            if delay is None:
                logger.warning(f"{policy.name} failed (attempt {attempt}), not retryable: {e}")
                raise
            logger.warning(
                f"{policy.name} failed, retrying in {delay:.1f}s "
                f"(attempt {attempt}/{policy.max_attempts}): {e}"
            )
            if delay > 0:
                await sleep(delay)
            attempt += 1
