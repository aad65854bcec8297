"""In-memory fixed-window rate limiter keyed by client IP.

State lives in the process, so limits are per worker. Running several
workers multiplies the effective allowance; a shared store would be needed
for that deployment shape.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Callable

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_SECONDS = 60.0
DEFAULT_MAX_REQUESTS = 10


@dataclass(slots=True)
class RateLimitEntry:
    """Counter for the window that started at ``window_start``."""

    count: int
    window_start: float


@dataclass(frozen=True, slots=True)
class RateLimitStatus:
    allowed: bool
    remaining: int


class RateLimiter:
    """Count requests per key inside hard-reset windows of ``window_seconds``."""

    def __init__(
        self,
        window_seconds: float = DEFAULT_WINDOW_SECONDS,
        max_requests: int = DEFAULT_MAX_REQUESTS,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")
        if max_requests < 1:
            raise ValueError("max_requests must be at least 1")

        self._window_seconds = window_seconds
        self._max_requests = max_requests
        self._clock = clock
        self._entries: dict[str, RateLimitEntry] = {}

    @property
    def window_seconds(self) -> float:
        return self._window_seconds

    @property
    def max_requests(self) -> int:
        return self._max_requests

    def __len__(self) -> int:
        return len(self._entries)

    def check(self, key: str) -> RateLimitStatus:
        """Register one request for ``key`` and report whether it is allowed.

        Rejected requests do not increment the counter.
        """

        now = self._clock()
        entry = self._entries.get(key)

        if entry is None or self._is_expired(entry, now):
            self._entries[key] = RateLimitEntry(count=1, window_start=now)
            return RateLimitStatus(allowed=True, remaining=self._max_requests - 1)

        if entry.count >= self._max_requests:
            return RateLimitStatus(allowed=False, remaining=0)

        entry.count += 1
        return RateLimitStatus(
            allowed=True,
            remaining=self._max_requests - entry.count,
        )

    def sweep(self) -> int:
        """Drop entries whose window has elapsed and return how many were removed."""

        now = self._clock()
        expired = [
            key for key, entry in self._entries.items() if self._is_expired(entry, now)
        ]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def reset(self) -> None:
        self._entries.clear()

    async def run_sweeper(self, interval_seconds: float = DEFAULT_WINDOW_SECONDS) -> None:
        """Sweep expired entries forever; cancel the task to stop it."""

        while True:
            await asyncio.sleep(interval_seconds)
            removed = self.sweep()
            if removed:
                logger.debug(
                    "Rate limiter sweep removed %d expired entries (%d active)",
                    removed,
                    len(self._entries),
                )

    def _is_expired(self, entry: RateLimitEntry, now: float) -> bool:
        return now - entry.window_start > self._window_seconds


__all__ = ["RateLimiter", "RateLimitEntry", "RateLimitStatus"]
