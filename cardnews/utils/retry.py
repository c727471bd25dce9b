"""Retry with exponential backoff for async operations."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

Sleep = Callable[[float], Awaitable[None]]


class RetryExecutor:
    """Runs a fallible coroutine factory until it succeeds or retries run out.

    Which failures are worth retrying is decided by the caller-supplied
    predicate; this class only sequences attempts and waits.
    """

    def __init__(self, sleep: Sleep = asyncio.sleep) -> None:
        self._sleep = sleep

    async def run(
        self,
        operation: Callable[[], Awaitable[T]],
        is_retryable: Callable[[BaseException], bool],
        max_attempts: int,
        base_delay: float,
    ) -> T:
        """Await ``operation()``; on a retryable failure wait ``base_delay * 2**(attempt-1)`` and retry.

        Args:
            operation: Zero-argument callable returning a fresh awaitable per attempt
            is_retryable: Predicate classifying an exception as transient
            max_attempts: Total attempts, including the first
            base_delay: Wait after the first failed attempt, in seconds

        Returns:
            The first successful result

        Raises:
            The last exception, once it is not retryable or attempts are exhausted
        """
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

        attempt = 1
        while True:
            try:
                return await operation()
            except Exception as exc:
                if not is_retryable(exc):
                    raise
                if attempt >= max_attempts:
                    logger.error("Giving up after %s attempts: %s", attempt, exc)
                    raise
                delay = base_delay * 2 ** (attempt - 1)
                logger.warning(
                    "Attempt %s/%s failed (%s); retrying in %.1fs",
                    attempt,
                    max_attempts,
                    exc,
                    delay,
                )
                await self._sleep(delay)
                attempt += 1
