"""ManualDelayScheduler — fake-clock IDelayScheduler for tests."""

from __future__ import annotations

import heapq
import itertools
from typing import TYPE_CHECKING

from ...ports.scheduling import IDelayScheduler

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable


class ManualDelayScheduler(IDelayScheduler):
    """
    Records scheduled tasks against a virtual clock that only moves when
    :meth:`advance` is awaited. Tasks due at the same instant run in the
    order they were scheduled.
    """

    def __init__(self) -> None:
        self._now = 0.0
        self._seq = itertools.count()
        self._queue: list[tuple[float, int, Callable[[], Awaitable[None]]]] = []

    def schedule_after(
        self, delay_seconds: float, task: Callable[[], Awaitable[None]]
    ) -> None:
        if delay_seconds < 0:
            raise ValueError("delay_seconds must be >= 0")
        heapq.heappush(self._queue, (self._now + delay_seconds, next(self._seq), task))

    async def advance(self, seconds: float) -> int:
        """Move the clock forward and run every task now due. Returns tasks run."""
        target = self._now + seconds
        ran = 0
        while self._queue and self._queue[0][0] <= target:
            due_at, _, task = heapq.heappop(self._queue)
            self._now = due_at
            await task()
            ran += 1
        self._now = target
        return ran

    # --- Test helpers ---

    @property
    def now(self) -> float:
        return self._now

    @property
    def pending_count(self) -> int:
        return len(self._queue)

    def clear(self) -> None:
        self._queue.clear()
