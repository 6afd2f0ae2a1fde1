"""Package-level default configuration values."""

from __future__ import annotations

from typing import Any

# Default throttling settings
DEFAULT_MAX_CONCURRENT = 25
DEFAULT_REQUESTS_PER_SECOND = 40
DEFAULT_WINDOW_SECONDS = 1.0

# Default batch settings
DEFAULT_BATCH_SIZE = 100
DEFAULT_BATCH_DELAY = 0.5  # seconds between batches

# Log level
DEFAULT_LOG_LEVEL = "WARNING"


def get_defaults() -> dict[str, Any]:
    """Return all defaults as a flat dictionary for merging."""
    return {
        "max_concurrent": DEFAULT_MAX_CONCURRENT,
        "requests_per_second": DEFAULT_REQUESTS_PER_SECOND,
        "window_seconds": DEFAULT_WINDOW_SECONDS,
        "batch_size": DEFAULT_BATCH_SIZE,
        "batch_delay": DEFAULT_BATCH_DELAY,
        "log_level": DEFAULT_LOG_LEVEL,
    }
