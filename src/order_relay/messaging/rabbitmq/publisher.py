"""RabbitMQPublisher — IMessagePublisher over the default or a topic exchange."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import aio_pika

from ...ports.messaging import IMessagePublisher
from ...primitives.exceptions import RelayError, TransportFailure
from ..envelope import EnvelopeCodec

if TYPE_CHECKING:
    from .connection import RabbitMQConnectionManager

logger = logging.getLogger("order_relay.messaging.rabbitmq")


class RabbitMQPublisher(IMessagePublisher):
    """RabbitMQ adapter implementing IMessagePublisher.

    With an empty ``exchange_name`` the channel is the queue name on the
    default exchange; otherwise the channel is the routing key on a durable
    topic exchange. The correlation id travels as a message header.
    """

    def __init__(
        self,
        connection: RabbitMQConnectionManager,
        *,
        exchange_name: str = "",
        codec: EnvelopeCodec | None = None,
    ) -> None:
        """Configure publisher.

        Args:
            connection: Shared connection manager.
            exchange_name: Exchange to publish to ("" = default exchange).
            codec: Frames the payload; default flat codec.
        """
        self._connection = connection
        self._exchange_name = exchange_name
        self._codec = codec or EnvelopeCodec()

    async def publish(self, channel: str, payload: str, correlation_id: str) -> None:
        """Publish *payload* with routing key *channel*."""
        logger.info(
            "Publishing to AMQP - Queue: %s, CorrelationId: %s",
            channel,
            correlation_id,
        )
        packed = self._codec.pack(payload, correlation_id)
        try:
            exchange = await self._connection.exchange(self._exchange_name)
            await exchange.publish(
                aio_pika.Message(
                    body=packed.body,
                    content_type="application/json",
                    headers=dict(packed.headers),
                ),
                routing_key=channel,
            )
        except RelayError:
            raise
        except Exception as e:
            raise TransportFailure(
                f"Failed to publish to AMQP: {e}", channel
            ) from e
        logger.debug("Published to AMQP successfully")

    async def health_check(self) -> bool:
        """Return True if the connection is healthy."""
        return await self._connection.health_check()
