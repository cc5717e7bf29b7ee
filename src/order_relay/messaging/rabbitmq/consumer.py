"""RabbitMQConsumer — IMessageConsumer with prefetch and ack-after-handle."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ...ports.messaging import IMessageConsumer
from ..envelope import InboundMessage, header_text

if TYPE_CHECKING:
    from aio_pika.abc import AbstractIncomingMessage, AbstractQueue

    from ...ports.messaging import MessageHandler
    from .connection import RabbitMQConnectionManager

logger = logging.getLogger("order_relay.messaging.rabbitmq")


def to_inbound(channel: str, raw: AbstractIncomingMessage) -> InboundMessage:
    """Normalize an aio-pika delivery (byte frame + header table)."""
    headers = {
        key: text
        for key, value in (raw.headers or {}).items()
        if (text := header_text(value)) is not None
    }
    return InboundMessage(channel=channel, body=raw.body, headers=headers)


class RabbitMQConsumer(IMessageConsumer):
    """RabbitMQ adapter implementing IMessageConsumer.

    Declares one durable queue per channel (bound to the topic exchange when
    one is configured). Messages are acknowledged once the handler returns;
    a handler error rejects without requeue, so nothing is redelivered.
    """

    def __init__(
        self,
        connection: RabbitMQConnectionManager,
        *,
        exchange_name: str = "",
        prefetch_count: int = 10,
    ) -> None:
        """Configure consumer.

        Args:
            connection: Shared connection manager.
            exchange_name: Topic exchange to bind to ("" = default exchange).
            prefetch_count: QoS prefetch, i.e. concurrent deliveries in flight.
        """
        self._connection = connection
        self._exchange_name = exchange_name
        self._prefetch_count = prefetch_count
        self._consumer_tags: list[tuple[AbstractQueue, str]] = []

    async def subscribe(self, channel: str, handler: MessageHandler) -> None:
        """Declare the channel's queue and start consuming it."""
        amqp_channel = await self._connection.connect()
        await amqp_channel.set_qos(prefetch_count=self._prefetch_count)
        queue = await amqp_channel.declare_queue(channel, durable=True)
        if self._exchange_name:
            exchange = await self._connection.exchange(self._exchange_name)
            await queue.bind(exchange, routing_key=channel)

        async def on_message(raw: AbstractIncomingMessage) -> None:
            async with raw.process(requeue=False, ignore_processed=True):
                await handler(to_inbound(channel, raw))

        tag = await queue.consume(on_message)
        self._consumer_tags.append((queue, tag))
        logger.info("Subscribed to AMQP queue %s", channel)

    async def start(self) -> None:
        """Deliveries are pushed by the broker; nothing to poll."""

    async def stop(self) -> None:
        """Cancel every consumer registered by subscribe()."""
        while self._consumer_tags:
            queue, tag = self._consumer_tags.pop()
            try:
                await queue.cancel(tag)
            except Exception:
                logger.exception("Failed to cancel AMQP consumer %s", tag)

    async def health_check(self) -> bool:
        """Return True if the connection is healthy."""
        return await self._connection.health_check()
