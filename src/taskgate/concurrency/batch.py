"""Push a range of item ids through a RequestQueue in chunks."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable, Iterable
from typing import Any

from taskgate.concurrency.queue import RequestQueue
from taskgate.errors.exceptions import ConfigurationError, ItemError
from taskgate.types import BatchReport

logger = logging.getLogger(__name__)


class BatchRunner:
    """Process item ids batch by batch through a shared RequestQueue.

    All items of a batch are submitted at once and the queue throttles them;
    the next batch starts only after every item of the current one settled,
    optionally after a short pause. A failing item is logged and recorded as
    ``None`` in the report; it never stops the run.
    """

    def __init__(
        self,
        queue: RequestQueue,
        batch_size: int = 100,
        batch_delay: float = 0.5,
    ) -> None:
        if batch_size <= 0:
            raise ConfigurationError(
                f"batch_size must be positive, got {batch_size}",
                field="batch_size",
                value=batch_size,
            )
        if batch_delay < 0:
            raise ConfigurationError(
                f"batch_delay cannot be negative, got {batch_delay}",
                field="batch_delay",
                value=batch_delay,
            )
        self._queue = queue
        self._batch_size = batch_size
        self._batch_delay = batch_delay
        self.errors: list[ItemError] = []

    @property
    def queue(self) -> RequestQueue:
        return self._queue

    async def run(
        self,
        handler: Callable[[Any], Awaitable[Any]],
        item_ids: Iterable[Any],
    ) -> BatchReport:
        """Run ``handler(item_id)`` for every id and return the combined report."""
        ids = list(item_ids)
        self.errors = []
        report = BatchReport()
        started = time.monotonic()

        for offset in range(0, len(ids), self._batch_size):
            batch = ids[offset : offset + self._batch_size]
            logger.info(
                "Processing batch: %s to %s (%d items)", batch[0], batch[-1], len(batch)
            )

            batch_report = await self._run_batch(handler, batch)
            logger.info(
                "Batch completed - Success: %d, Failed: %d",
                batch_report.succeeded,
                batch_report.failed,
            )
            report = report.merge(batch_report)

            if offset + self._batch_size < len(ids) and self._batch_delay > 0:
                await asyncio.sleep(self._batch_delay)

        report.duration_seconds = time.monotonic() - started
        return report

    async def run_range(
        self,
        handler: Callable[[int], Awaitable[Any]],
        start: int,
        stop: int,
    ) -> BatchReport:
        """Run ``handler`` over the inclusive integer range ``start..stop``."""
        if stop < start:
            logger.info("Nothing to process: range %d..%d is empty", start, stop)
            return BatchReport()
        return await self.run(handler, range(start, stop + 1))

    async def _run_batch(
        self,
        handler: Callable[[Any], Awaitable[Any]],
        batch: list[Any],
    ) -> BatchReport:
        started = time.monotonic()
        outcomes = await self._queue.map(handler, batch, return_exceptions=True)

        report = BatchReport(total=len(batch))
        for item_id, outcome in zip(batch, outcomes, strict=True):
            if isinstance(outcome, BaseException):
                error = ItemError(
                    f"Item {item_id} failed: {outcome}", item_id=item_id, inner=outcome
                )
                logger.error("%s", error.message)
                self.errors.append(error)
                report.failed += 1
                report.failed_ids.append(item_id)
                report.results.append(None)
            else:
                report.succeeded += 1
                report.results.append(outcome)

        report.duration_seconds = time.monotonic() - started
        return report
