"""InMemoryPublisher — IMessagePublisher with assertion helpers for tests."""

from __future__ import annotations

import logging

from ...ports.messaging import IMessagePublisher
from ..envelope import EnvelopeCodec, InboundMessage
from .bus import InMemoryMessageBus

logger = logging.getLogger("order_relay.messaging.memory")


class InMemoryPublisher(IMessagePublisher):
    """In-memory publisher that records frames and dispatches them on a bus.

    Pass a shared InMemoryMessageBus to connect with InMemoryConsumer so that
    publish() triggers subscribed handlers. get_published() and
    assert_published() support test assertions.
    """

    def __init__(
        self,
        bus: InMemoryMessageBus | None = None,
        *,
        codec: EnvelopeCodec | None = None,
    ) -> None:
        """If bus is None, a new bus is created (no consumer connection)."""
        self._bus = bus or InMemoryMessageBus()
        self._codec = codec or EnvelopeCodec()

    async def publish(self, channel: str, payload: str, correlation_id: str) -> None:
        """Publish to the in-memory bus (and trigger any subscribed handlers)."""
        logger.info(
            "Publishing to memory - Channel: %s, CorrelationId: %s",
            channel,
            correlation_id,
        )
        packed = self._codec.pack(payload, correlation_id)
        await self._bus.deliver(
            InboundMessage(channel=channel, body=packed.body, headers=packed.headers)
        )

    def get_published(self, channel: str | None = None) -> list[InboundMessage]:
        """Return all frames published so far."""
        return self._bus.get_published(channel)

    def assert_published(self, channel: str, count: int = 1) -> None:
        """Assert that exactly `count` messages were published to `channel`.

        Raises AssertionError if not met.
        """
        published = self.get_published()
        matching = [m for m in published if m.channel == channel]
        assert len(matching) == count, (
            f"Expected {count} message(s) on channel={channel!r}, "
            f"got {len(matching)}. Published: {[m.channel for m in published]}"
        )

    async def health_check(self) -> bool:
        return True

    @property
    def bus(self) -> InMemoryMessageBus:
        """Return the bus (e.g. to pass to InMemoryConsumer)."""
        return self._bus
