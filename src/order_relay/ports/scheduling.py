"""IDelayScheduler — protocol for running a task after a delay."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable


@runtime_checkable
class IDelayScheduler(Protocol):
    """Port for fire-and-forget delayed execution.

    Usage::

        scheduler = AsyncioDelayScheduler()

        # Run the coroutine function 7.5 seconds from now
        scheduler.schedule_after(7.5, publish_attempt)

    Tests inject :class:`~order_relay.adapters.memory.ManualDelayScheduler`
    to control time explicitly.
    """

    def schedule_after(
        self,
        delay_seconds: float,
        task: Callable[[], Awaitable[None]],
    ) -> None:
        """Schedule *task* to run once *delay_seconds* have elapsed.

        Must not block the caller. Once scheduled, a task is never cancelled
        except when the scheduler itself is shut down.
        """
        ...
