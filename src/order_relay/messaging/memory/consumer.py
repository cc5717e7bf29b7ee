"""InMemoryConsumer — IMessageConsumer with synchronous dispatch for tests."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ...ports.messaging import IMessageConsumer

if TYPE_CHECKING:
    from ...ports.messaging import MessageHandler
    from .bus import InMemoryMessageBus


class InMemoryConsumer(IMessageConsumer):
    """In-memory consumer that registers handlers on a shared bus.

    Use the same InMemoryMessageBus as InMemoryPublisher so that publish()
    triggers handlers synchronously in tests.
    """

    def __init__(self, bus: InMemoryMessageBus) -> None:
        """Requires a shared bus (typically from InMemoryPublisher.bus)."""
        self._bus = bus

    async def subscribe(self, channel: str, handler: MessageHandler) -> None:
        """Register handler for the channel."""
        self._bus.register(channel, handler)

    async def start(self) -> None:
        pass

    async def stop(self) -> None:
        pass

    async def health_check(self) -> bool:
        return True
