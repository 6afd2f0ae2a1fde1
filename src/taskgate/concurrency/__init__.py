"""Concurrency — throttled request queue, its gate and rate limiter."""

from taskgate.concurrency.batch import BatchRunner
from taskgate.concurrency.gate import ConcurrencyGate
from taskgate.concurrency.queue import PendingEntry, RequestQueue
from taskgate.concurrency.rate_limiter import SlidingWindowRateLimiter

__all__ = [
    "BatchRunner",
    "ConcurrencyGate",
    "PendingEntry",
    "RequestQueue",
    "SlidingWindowRateLimiter",
]
