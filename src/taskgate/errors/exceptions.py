"""Custom exception hierarchy for taskgate.

Task failures are never wrapped: the dispatcher hands the task's own
exception back through the submitter's future. These classes cover errors
that originate in taskgate itself.
"""

from __future__ import annotations

from typing import Any


class TaskGateError(Exception):
    """Base exception for all taskgate errors."""

    def __init__(self, message: str = "", **kwargs: Any) -> None:
        super().__init__(message)
        self.message = message


class ConfigurationError(TaskGateError):
    """Invalid limit or setting, rejected at construction time.

    Examples: max_concurrent=0, requests_per_second=-1, window_seconds=0.
    """

    def __init__(
        self,
        message: str = "",
        field: str | None = None,
        value: Any = None,
    ) -> None:
        super().__init__(message)
        self.field = field
        self.value = value


class ItemError(TaskGateError):
    """Error isolated to a single batch item — other items continue."""

    def __init__(
        self,
        message: str = "",
        item_id: Any = None,
        inner: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.item_id = item_id
        self.inner = inner
