"""Error handling — exception hierarchy for taskgate."""

from taskgate.errors.exceptions import (
    ConfigurationError,
    ItemError,
    TaskGateError,
)

__all__ = [
    "TaskGateError",
    "ConfigurationError",
    "ItemError",
]
