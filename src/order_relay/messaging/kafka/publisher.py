"""KafkaPublisher — IMessagePublisher with the correlation id as a record header."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from aiokafka import AIOKafkaProducer

from ...ports.messaging import IMessagePublisher
from ...primitives.exceptions import RelayError, TransportFailure
from ..envelope import EnvelopeCodec

if TYPE_CHECKING:
    from .connection import KafkaConnectionManager

logger = logging.getLogger("order_relay.messaging.kafka")


class KafkaPublisher(IMessagePublisher):
    """Kafka adapter implementing IMessagePublisher.

    Uses the channel as the Kafka topic name. Header values are UTF-8 bytes.
    """

    def __init__(
        self,
        connection: KafkaConnectionManager,
        *,
        codec: EnvelopeCodec | None = None,
    ) -> None:
        """Configure publisher.

        Args:
            connection: Shared connection config.
            codec: Frames the payload; default flat codec.
        """
        self._connection = connection
        self._codec = codec or EnvelopeCodec()
        self._producer: AIOKafkaProducer | None = None
        self._producer_lock = asyncio.Lock()

    async def _get_producer(self) -> AIOKafkaProducer:
        """Create or return existing producer."""
        async with self._producer_lock:
            if self._producer is None:
                producer = AIOKafkaProducer(**self._connection.client_config())
                await producer.start()
                self._producer = producer
        return self._producer

    async def publish(self, channel: str, payload: str, correlation_id: str) -> None:
        """Publish *payload* to the Kafka topic *channel*."""
        logger.info(
            "Publishing to Kafka - Channel: %s, CorrelationId: %s",
            channel,
            correlation_id,
        )
        packed = self._codec.pack(payload, correlation_id)
        headers = [(k, v.encode("utf-8")) for k, v in packed.headers.items()]
        try:
            producer = await self._get_producer()
            await producer.send_and_wait(channel, value=packed.body, headers=headers)
        except RelayError:
            raise
        except Exception as e:
            raise TransportFailure(
                f"Failed to publish to Kafka: {e}", channel
            ) from e
        logger.debug("Published to Kafka successfully")

    async def close(self) -> None:
        """Stop the producer."""
        if self._producer is not None:
            await self._producer.stop()
            self._producer = None

    async def health_check(self) -> bool:
        """Return True if the cluster is reachable."""
        return await self._connection.health_check()
