"""Retry policy and the attempt-with-retry combinator"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """How many times to try an operation and how long to wait between tries"""
    max_attempts: int = 2
    backoff_delay: float = 3.0

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")
        if self.backoff_delay < 0:
            raise ValueError(f"backoff_delay must be >= 0, got {self.backoff_delay}")


async def attempt_with_retry(
    operation: Callable[[], Awaitable[Optional[T]]],
    policy: RetryPolicy,
    label: str = "operation",
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> Optional[T]:
    """
    Run an async operation under a retry policy.

    An exception or a None result counts as a failed attempt. Waits
    policy.backoff_delay between attempts (never after the last one).

    Returns:
        The first non-None result, or None once all attempts are exhausted.
    """
    for attempt in range(1, policy.max_attempts + 1):
        try:
            result = await operation()
            if result is not None:
                if attempt > 1:
                    logger.info(f"[RETRY] {label} succeeded on attempt {attempt}")
                return result
            logger.warning(f"[RETRY] {label} returned no result (attempt {attempt}/{policy.max_attempts})")
        except Exception as e:
            logger.warning(f"[RETRY] {label} failed (attempt {attempt}/{policy.max_attempts}): {e}")

        if attempt < policy.max_attempts and policy.backoff_delay > 0:
            await sleep(policy.backoff_delay)

    logger.error(f"[RETRY] {label} exhausted {policy.max_attempts} attempts")
    return None
