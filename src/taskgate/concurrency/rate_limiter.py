"""Sliding-window rate limiter for task starts."""

from __future__ import annotations

import asyncio
import logging
import time
from collections import deque
from collections.abc import Awaitable, Callable

from taskgate.errors.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class SlidingWindowRateLimiter:
    """Allow at most ``requests_per_second`` starts in any trailing window.

    Every granted clearance logs a start timestamp. Timestamps at or before
    ``now - window_seconds`` no longer count and are pruned whenever the
    limiter is consulted. When the window is full the caller sleeps until the
    oldest timestamp expires and then checks again, since other callers may
    have filled the window in the meantime.

    Waiters are served in arrival order: the lock is held across the sleep,
    and ``asyncio.Lock`` wakes waiters first-in first-out.
    """

    def __init__(
        self,
        requests_per_second: int = 40,
        window_seconds: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if requests_per_second <= 0:
            raise ConfigurationError(
                f"requests_per_second must be positive, got {requests_per_second}",
                field="requests_per_second",
                value=requests_per_second,
            )
        if window_seconds <= 0:
            raise ConfigurationError(
                f"window_seconds must be positive, got {window_seconds}",
                field="window_seconds",
                value=window_seconds,
            )
        self._limit = requests_per_second
        self._window = float(window_seconds)
        self._clock = clock
        self._sleep = sleep

        self._starts: deque[float] = deque()
        self._lock = asyncio.Lock()

        # Stats
        self._total_granted = 0
        self._total_wait_seconds = 0.0

    @property
    def requests_per_second(self) -> int:
        return self._limit

    @property
    def window_seconds(self) -> float:
        return self._window

    @property
    def in_window(self) -> int:
        """Number of starts still counted against the current window."""
        self._prune(self._clock())
        return len(self._starts)

    async def acquire(self) -> float:
        """Wait until one more start fits in the window, then record it.

        Returns the time spent waiting (seconds).
        """
        started = self._clock()

        async with self._lock:
            while True:
                now = self._clock()
                self._prune(now)

                if len(self._starts) < self._limit:
                    self._starts.append(now)
                    self._total_granted += 1
                    break

                # Never a negative sleep, even if the clock misbehaves
                wait_time = max(self._starts[0] + self._window - now, 0.0)
                logger.debug(
                    "Rate window full (%d/%d), waiting %.3fs",
                    len(self._starts),
                    self._limit,
                    wait_time,
                )
                await self._sleep(wait_time)

        waited = max(now - started, 0.0)
        self._total_wait_seconds += waited
        return waited

    @property
    def stats(self) -> dict:
        """Return current rate limiter statistics."""
        return {
            "in_window": self.in_window,
            "total_granted": self._total_granted,
            "total_wait_seconds": self._total_wait_seconds,
        }

    def reset(self) -> None:
        """Reset all state (for testing)."""
        self._starts.clear()
        self._total_granted = 0
        self._total_wait_seconds = 0.0

    def _prune(self, now: float) -> None:
        """Drop start timestamps that have left the window."""
        cutoff = now - self._window
        while self._starts and self._starts[0] <= cutoff:
            self._starts.popleft()
