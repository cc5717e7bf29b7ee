"""AsyncioDelayScheduler — IDelayScheduler on the running event loop."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from ..ports.scheduling import IDelayScheduler

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

logger = logging.getLogger("order_relay.scheduling")


class AsyncioDelayScheduler(IDelayScheduler):
    """Runs each task in a background :class:`asyncio.Task` after its delay.

    Delays elapse concurrently; at most ``concurrency`` tasks execute at the
    same time once due. Must be used from within a running event loop.
    """

    def __init__(self, concurrency: int = 2) -> None:
        if concurrency < 2:
            raise ValueError("concurrency must be >= 2")
        self._concurrency = concurrency
        self._semaphore = asyncio.Semaphore(concurrency)
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def concurrency(self) -> int:
        return self._concurrency

    @property
    def pending_count(self) -> int:
        return len(self._tasks)

    def schedule_after(
        self, delay_seconds: float, task: Callable[[], Awaitable[None]]
    ) -> None:
        if delay_seconds < 0:
            raise ValueError("delay_seconds must be >= 0")
        handle = asyncio.get_running_loop().create_task(
            self._run_later(delay_seconds, task)
        )
        self._tasks.add(handle)
        handle.add_done_callback(self._tasks.discard)

    async def _run_later(
        self, delay_seconds: float, task: Callable[[], Awaitable[None]]
    ) -> None:
        await asyncio.sleep(delay_seconds)
        async with self._semaphore:
            try:
                await task()
            except Exception:
                logger.exception("Scheduled task failed")

    async def aclose(self) -> None:
        """Cancel every task that has not finished yet."""
        pending = list(self._tasks)
        for handle in pending:
            handle.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
            logger.info("Cancelled %d pending scheduled task(s)", len(pending))
        self._tasks.clear()
