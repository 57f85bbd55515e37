"""Caller-side retry with exponential backoff for analysis calls."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional, TypeVar

from .config import RetryConfig
from .errors import AnalysisError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def backoff_delay(config: RetryConfig, attempt: int) -> float:
    """Delay before the attempt after ``attempt`` (1-based)."""
    return config.delay_seconds * (config.backoff_multiplier ** (attempt - 1))


async def with_retry(
    fn: Callable[[], Awaitable[T]],
    config: Optional[RetryConfig] = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """Await ``fn`` until it succeeds or attempts run out.

    Only retryable AnalysisErrors are retried; anything else propagates
    immediately. The last error is re-raised when every attempt fails.
    """
    config = config or RetryConfig()
    attempts = max(1, config.max_attempts)

    attempt = 1
    while True:
        try:
            return await fn()
        except AnalysisError as exc:
            if not exc.retryable or attempt >= attempts:
                raise
            delay = backoff_delay(config, attempt)
            logger.warning(
                "Attempt %d/%d failed (%s), retrying in %.1fs",
                attempt,
                attempts,
                exc.kind.value,
                delay,
            )
            await sleep(delay)
        attempt += 1
