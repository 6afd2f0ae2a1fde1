"""taskgate — throttled async task dispatcher."""

from taskgate.concurrency import BatchRunner, RequestQueue, SlidingWindowRateLimiter
from taskgate.config import DispatcherConfig
from taskgate.errors import ConfigurationError, TaskGateError

__version__ = "0.1.0"

__all__ = [
    "BatchRunner",
    "ConfigurationError",
    "DispatcherConfig",
    "RequestQueue",
    "SlidingWindowRateLimiter",
    "TaskGateError",
]
