"""One-shot timers for deferred work on the single UI event queue.

A scheduled callback cannot be cancelled once queued. Callbacks always
run on the thread that drives the queue, so view-model state is never
mutated concurrently.
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
import logging
from abc import ABC, abstractmethod
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class Scheduler(ABC):
    """Runs a callback once after a delay on the owning event loop."""

    @abstractmethod
    def call_later(self, delay_seconds: float, callback: Callable[[], None]) -> None:
        """Schedule callback to run once, delay_seconds from now."""


class ManualScheduler(Scheduler):
    """Deterministic timer queue pumped by its host loop.

    The host advances the clock (a terminal input loop after each key
    poll, or a test directly). Callbacks due at the same instant run in
    the order they were scheduled.
    """

    def __init__(self):
        self._now = 0.0
        self._queue: list[tuple[float, int, Callable[[], None]]] = []
        self._counter = itertools.count()

    @property
    def now(self) -> float:
        return self._now

    def call_later(self, delay_seconds: float, callback: Callable[[], None]) -> None:
        due = self._now + max(delay_seconds, 0.0)
        heapq.heappush(self._queue, (due, next(self._counter), callback))
        logger.debug(f"Scheduled callback at t={due:.3f}s")

    def pending(self) -> int:
        """Number of callbacks not yet run."""
        return len(self._queue)

    def advance(self, seconds: float) -> int:
        """Move the clock forward and run everything that became due.

        Returns:
            The number of callbacks that ran.
        """
        target = self._now + max(seconds, 0.0)
        ran = 0
        while self._queue and self._queue[0][0] <= target:
            due, _, callback = heapq.heappop(self._queue)
            self._now = due
            callback()
            ran += 1
        self._now = target
        return ran

    def run_pending(self) -> int:
        """Run every queued callback regardless of its due time."""
        ran = 0
        while self._queue:
            due, _, callback = heapq.heappop(self._queue)
            self._now = max(self._now, due)
            callback()
            ran += 1
        return ran


class AsyncioScheduler(Scheduler):
    """Timers on an asyncio event loop (the loop Textual runs on)."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    def call_later(self, delay_seconds: float, callback: Callable[[], None]) -> None:
        loop = self._loop or asyncio.get_running_loop()
        loop.call_later(delay_seconds, callback)
