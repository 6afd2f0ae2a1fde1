"""Shared Pydantic models for taskgate."""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field

# ── Enums ──


class EntryState(StrEnum):
    QUEUED = "queued"
    DISPATCHED = "dispatched"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    @property
    def terminal(self) -> bool:
        return self in (EntryState.SUCCEEDED, EntryState.FAILED)


# ── Runtime models ──


class DispatcherStats(BaseModel):
    submitted: int = 0
    dispatched: int = 0
    succeeded: int = 0
    failed: int = 0
    pending: int = 0
    active: int = 0
    rate_wait_seconds: float = 0.0

    @property
    def settled(self) -> int:
        return self.succeeded + self.failed


class BatchReport(BaseModel):
    total: int = 0
    succeeded: int = 0
    failed: int = 0
    failed_ids: list[Any] = Field(default_factory=list)
    results: list[Any] = Field(default_factory=list)
    duration_seconds: float = 0.0

    def merge(self, other: BatchReport) -> BatchReport:
        """Combine two reports, e.g. consecutive batches of one run."""
        return BatchReport(
            total=self.total + other.total,
            succeeded=self.succeeded + other.succeeded,
            failed=self.failed + other.failed,
            failed_ids=[*self.failed_ids, *other.failed_ids],
            results=[*self.results, *other.results],
            duration_seconds=self.duration_seconds + other.duration_seconds,
        )
