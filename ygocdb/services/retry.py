"""
Bounded retry with exponential backoff.

The policy is independent of the sleep primitive: tests pass a fake
``sleep`` to observe delays without waiting.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TypeVar

import httpx

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Statuses worth another attempt; other 4xx are final
RETRYABLE_STATUS_CODES = frozenset({408, 429, 500, 502, 503, 504})


def is_retryable(error: BaseException) -> bool:
    """Transport failures and throttling/server errors are retryable."""
    if isinstance(error, httpx.HTTPStatusError):
        return error.response.status_code in RETRYABLE_STATUS_CODES
    return isinstance(error, httpx.TransportError)


@dataclass(frozen=True)
class RetryPolicy:
    """
    Retry policy.

    Attributes:
        max_retries: Retries after the first attempt (0 = single attempt)
        base_delay: Delay before the first retry, in seconds
        factor: Multiplier applied to the delay after each retry
        max_delay: Upper bound for any single delay
        should_retry: Predicate deciding whether an error is retryable
        sleep: Awaitable sleep function
    """

    max_retries: int = 2
    base_delay: float = 0.1
    factor: float = 2.0
    max_delay: float = 10.0
    should_retry: Callable[[BaseException], bool] = is_retryable
    sleep: Callable[[float], Awaitable[None]] = field(default=asyncio.sleep, repr=False)

    def delay_for(self, retry: int) -> float:
        """Delay before retry number ``retry`` (1-based)."""
        return min(self.max_delay, self.base_delay * self.factor ** (retry - 1))

    async def run(self, operation: Callable[[], Awaitable[T]], *, label: str = "") -> T:
        """
        Run ``operation`` until it succeeds or retries are exhausted.

        Non-retryable errors propagate immediately. After the last retry
        the last error propagates unchanged.
        """
        retry = 0
        while True:
            try:
                return await operation()
            except Exception as e:
                if retry >= self.max_retries or not self.should_retry(e):
                    raise
                retry += 1
                delay = self.delay_for(retry)
                logger.warning(
                    "Retrying %s in %.2fs (retry %d/%d): %s",
                    label or "operation",
                    delay,
                    retry,
                    self.max_retries,
                    e,
                )
                await self.sleep(delay)
