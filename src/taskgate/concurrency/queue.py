"""Throttled request queue: FIFO dispatch under a concurrency gate and rate limiter."""

from __future__ import annotations

import asyncio
import functools
import inspect
import itertools
import logging
from collections import deque
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass
from typing import Any, TypeVar

from taskgate.concurrency.gate import ConcurrencyGate
from taskgate.concurrency.rate_limiter import SlidingWindowRateLimiter
from taskgate.types import DispatcherStats, EntryState

logger = logging.getLogger(__name__)

T = TypeVar("T")

_TRANSITIONS: dict[EntryState, set[EntryState]] = {
    EntryState.QUEUED: {EntryState.DISPATCHED},
    EntryState.DISPATCHED: {EntryState.SUCCEEDED, EntryState.FAILED},
    EntryState.SUCCEEDED: set(),
    EntryState.FAILED: set(),
}


@dataclass
class PendingEntry:
    """A submitted task and the future its outcome is delivered to."""

    seq: int
    task: Callable[[], Awaitable[Any]]
    future: asyncio.Future[Any]
    state: EntryState = EntryState.QUEUED

    def transition(self, new_state: EntryState) -> None:
        if new_state not in _TRANSITIONS[self.state]:
            raise RuntimeError(
                f"Entry #{self.seq}: illegal transition {self.state} -> {new_state}"
            )
        self.state = new_state


class RequestQueue:
    """Run async tasks with bounded concurrency and a bounded start rate.

    Tasks start in submission order. A task holds a gate slot from the moment
    it leaves the queue (including while it waits for rate clearance) until it
    settles. Each settlement frees a slot and immediately offers it to the next
    queued entry, so the queue drains without a poller.

    Failures stay with the failing task's future; siblings are unaffected and
    nothing is retried. An instance is bound to the event loop it is first
    used on and must only be touched from that loop.
    """

    def __init__(
        self,
        max_concurrent: int = 30,
        requests_per_second: int = 40,
        *,
        window_seconds: float = 1.0,
        rate_limiter: SlidingWindowRateLimiter | None = None,
    ) -> None:
        self._gate = ConcurrencyGate(max_concurrent)
        self._rate_limiter = rate_limiter or SlidingWindowRateLimiter(
            requests_per_second, window_seconds
        )
        self._queue: deque[PendingEntry] = deque()
        self._running: set[asyncio.Task[None]] = set()
        self._seq = itertools.count()
        self._idle = asyncio.Event()
        self._idle.set()

        # Stats
        self._submitted = 0
        self._dispatched = 0
        self._succeeded = 0
        self._failed = 0
        self._rate_wait_seconds = 0.0

    @property
    def rate_limiter(self) -> SlidingWindowRateLimiter:
        return self._rate_limiter

    @property
    def gate(self) -> ConcurrencyGate:
        return self._gate

    @property
    def pending(self) -> int:
        """Entries still waiting to be dispatched."""
        return len(self._queue)

    @property
    def active(self) -> int:
        """Entries dispatched but not yet settled."""
        return self._gate.active

    @property
    def stats(self) -> DispatcherStats:
        return DispatcherStats(
            submitted=self._submitted,
            dispatched=self._dispatched,
            succeeded=self._succeeded,
            failed=self._failed,
            pending=self.pending,
            active=self.active,
            rate_wait_seconds=self._rate_wait_seconds,
        )

    def submit(self, task: Callable[[], Awaitable[T]]) -> asyncio.Future[T]:
        """Queue ``task`` and return a future for its outcome.

        Must be called from a running event loop. The future resolves with
        the task's return value or is rejected with the exception the task
        raised, exactly once.
        """
        future: asyncio.Future[T] = asyncio.get_running_loop().create_future()
        entry = PendingEntry(seq=next(self._seq), task=task, future=future)
        self._queue.append(entry)
        self._submitted += 1
        self._idle.clear()
        self._pump()
        return future

    async def run(self, task: Callable[[], Awaitable[T]]) -> T:
        """Submit ``task`` and wait for its result."""
        return await self.submit(task)

    async def map(
        self,
        fn: Callable[[Any], Awaitable[T]],
        items: Iterable[Any],
        *,
        return_exceptions: bool = True,
    ) -> list[Any]:
        """Submit ``fn(item)`` for every item, in order.

        Returns results in input order. With ``return_exceptions`` (the
        default) a failed item yields its exception instead of a result.
        """
        futures = [self.submit(functools.partial(fn, item)) for item in items]
        if not futures:
            return []
        return list(await asyncio.gather(*futures, return_exceptions=return_exceptions))

    async def join(self) -> None:
        """Wait until nothing is queued or executing."""
        await self._idle.wait()

    def _pump(self) -> None:
        """Dispatch queued entries while the gate has room.

        Safe to call at any time; it never blocks and never recurses.
        """
        while self._queue and self._gate.has_capacity:
            entry = self._queue.popleft()
            entry.transition(EntryState.DISPATCHED)
            self._gate.acquire()
            self._dispatched += 1

            runner = asyncio.get_running_loop().create_task(
                self._execute(entry), name=f"taskgate-entry-{entry.seq}"
            )
            self._running.add(runner)
            runner.add_done_callback(self._running.discard)

        if not self._queue and self._gate.active == 0:
            self._idle.set()

    async def _execute(self, entry: PendingEntry) -> None:
        try:
            waited = await self._rate_limiter.acquire()
            self._rate_wait_seconds += waited
            logger.debug(
                "Starting entry #%d (active=%d, pending=%d, waited %.3fs)",
                entry.seq,
                self._gate.active,
                len(self._queue),
                waited,
            )
            result = await _invoke(entry.task)
        except asyncio.CancelledError:
            entry.transition(EntryState.FAILED)
            self._failed += 1
            if not entry.future.done():
                entry.future.cancel()
            raise
        except BaseException as exc:
            entry.transition(EntryState.FAILED)
            self._failed += 1
            logger.debug("Entry #%d failed: %r", entry.seq, exc)
            _settle(entry, exception=exc)
            if isinstance(exc, (KeyboardInterrupt, SystemExit)):
                raise
        else:
            entry.transition(EntryState.SUCCEEDED)
            self._succeeded += 1
            _settle(entry, result=result)
        finally:
            self._gate.release()
            self._pump()

    def __repr__(self) -> str:
        return (
            f"RequestQueue(max_concurrent={self._gate.max_concurrent}, "
            f"requests_per_second={self._rate_limiter.requests_per_second}, "
            f"pending={self.pending}, active={self.active})"
        )


async def _invoke(task: Callable[[], Awaitable[T]]) -> T:
    awaitable = task()
    if not inspect.isawaitable(awaitable):
        raise TypeError(f"Task {task!r} did not return an awaitable")
    return await awaitable


def _settle(
    entry: PendingEntry,
    result: Any = None,
    exception: BaseException | None = None,
) -> None:
    # The submitter may have cancelled the future (e.g. a wait_for timeout)
    if entry.future.done():
        logger.debug("Entry #%d settled after its future was cancelled", entry.seq)
        return
    if exception is not None:
        entry.future.set_exception(exception)
    else:
        entry.future.set_result(result)
