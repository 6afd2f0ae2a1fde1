"""Concurrency gate bounding how many tasks may execute at once."""

from __future__ import annotations

from taskgate.errors.exceptions import ConfigurationError


class ConcurrencyGate:
    """Counter of in-flight tasks with a hard upper bound.

    Unlike ``asyncio.Semaphore`` the gate never blocks: the dispatch loop asks
    ``has_capacity`` first and only then takes a slot, so a refused acquire is
    an accounting bug rather than something to wait on.
    """

    def __init__(self, max_concurrent: int) -> None:
        if max_concurrent <= 0:
            raise ConfigurationError(
                f"max_concurrent must be positive, got {max_concurrent}",
                field="max_concurrent",
                value=max_concurrent,
            )
        self._max_concurrent = max_concurrent
        self._active = 0
        self._peak = 0

    @property
    def max_concurrent(self) -> int:
        return self._max_concurrent

    @property
    def active(self) -> int:
        return self._active

    @property
    def peak(self) -> int:
        """Highest number of simultaneously held slots seen so far."""
        return self._peak

    @property
    def has_capacity(self) -> bool:
        return self._active < self._max_concurrent

    def acquire(self) -> None:
        if not self.has_capacity:
            raise RuntimeError(
                f"Concurrency gate saturated ({self._active}/{self._max_concurrent})"
            )
        self._active += 1
        self._peak = max(self._peak, self._active)

    def release(self) -> None:
        if self._active <= 0:
            raise RuntimeError("Concurrency gate released more times than acquired")
        self._active -= 1
