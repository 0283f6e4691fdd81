# Copyright (c) 2026 TempoOS Contributors. All Rights Reserved.

"""
Retry Policy & Manager — Bounded retry with exponential backoff.

Only transient store failures are retried. A call that reached the store
and got a definite answer (unexpected status, missing folder) is raised
straight away.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, TypeVar

from folder_catalog.storage.errors import TransportFailure

logger = logging.getLogger("catalog.retry")

T = TypeVar("T")


@dataclass
class RetryPolicy:
    """Configuration for retry behavior."""
    max_attempts: int = 3
    backoff_base: float = 0.5        # seconds
    backoff_multiplier: float = 2.0  # exponential factor
    max_backoff: float = 30.0        # cap

    def next_delay(self, attempt: int) -> float:
        """Calculate delay before next retry (exponential backoff)."""
        delay = self.backoff_base * (self.backoff_multiplier ** (attempt - 1))
        return min(delay, self.max_backoff)


DEFAULT_RETRY_POLICY = RetryPolicy()


class RetryManager:
    """Runs store calls under a RetryPolicy."""

    def __init__(self, policy: Optional[RetryPolicy] = None):
        self._policy = policy or DEFAULT_RETRY_POLICY

    @property
    def policy(self) -> RetryPolicy:
        return self._policy

    def should_retry(self, attempt: int, error: Exception) -> bool:
        return isinstance(error, TransportFailure) and attempt < self._policy.max_attempts

    async def wait_before_retry(self, attempt: int) -> None:
        """Wait with exponential backoff before retrying."""
        delay = self._policy.next_delay(attempt)
        logger.info("Retry: waiting %.1fs before attempt %d", delay, attempt + 1)
        await asyncio.sleep(delay)

    async def run(self, operation: str, call: Callable[[], Awaitable[T]]) -> T:
        """
        Await ``call()`` until it succeeds or the policy gives up.

        ``call`` must build a fresh awaitable each time.
        """
        attempt = 1
        while True:
            try:
                return await call()
            except TransportFailure as e:
                if not self.should_retry(attempt, e):
                    logger.error(
                        "Store call %s failed on attempt %d: %s — giving up",
                        operation, attempt, e,
                    )
                    raise
                logger.warning(
                    "Store call %s failed on attempt %d: %s — will retry",
                    operation, attempt, e,
                )
            await self.wait_before_retry(attempt)
            attempt += 1
