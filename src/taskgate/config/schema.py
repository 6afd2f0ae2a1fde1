"""Pydantic models for dispatcher configuration."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, Field, field_validator

from taskgate.config.defaults import (
    DEFAULT_BATCH_DELAY,
    DEFAULT_BATCH_SIZE,
    DEFAULT_LOG_LEVEL,
    DEFAULT_MAX_CONCURRENT,
    DEFAULT_REQUESTS_PER_SECOND,
    DEFAULT_WINDOW_SECONDS,
)

if TYPE_CHECKING:
    from taskgate.concurrency.batch import BatchRunner
    from taskgate.concurrency.queue import RequestQueue

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class DispatcherConfig(BaseModel):
    max_concurrent: int = Field(default=DEFAULT_MAX_CONCURRENT, gt=0)
    requests_per_second: int = Field(default=DEFAULT_REQUESTS_PER_SECOND, gt=0)
    window_seconds: float = Field(default=DEFAULT_WINDOW_SECONDS, gt=0)
    batch_size: int = Field(default=DEFAULT_BATCH_SIZE, gt=0)
    batch_delay: float = Field(default=DEFAULT_BATCH_DELAY, ge=0)
    log_level: str = DEFAULT_LOG_LEVEL

    model_config = {"extra": "ignore"}

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"Unknown log level: {value}")
        return level

    def build_queue(self) -> RequestQueue:
        """Construct a RequestQueue with these limits."""
        from taskgate.concurrency.queue import RequestQueue

        return RequestQueue(
            max_concurrent=self.max_concurrent,
            requests_per_second=self.requests_per_second,
            window_seconds=self.window_seconds,
        )

    def build_batch_runner(self, queue: RequestQueue | None = None) -> BatchRunner:
        """Construct a BatchRunner over ``queue`` (or a fresh one)."""
        from taskgate.concurrency.batch import BatchRunner

        return BatchRunner(
            queue or self.build_queue(),
            batch_size=self.batch_size,
            batch_delay=self.batch_delay,
        )
