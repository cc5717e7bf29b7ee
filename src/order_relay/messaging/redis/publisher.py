"""RedisPublisher — IMessagePublisher over Redis pub/sub."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ...ports.messaging import IMessagePublisher
from ...primitives.exceptions import RelayError, TransportFailure
from ..envelope import EnvelopeCodec, WireFormat

if TYPE_CHECKING:
    from .connection import RedisConnectionManager

logger = logging.getLogger("order_relay.messaging.redis")


class RedisPublisher(IMessagePublisher):
    """Redis adapter implementing IMessagePublisher.

    Pub/sub frames carry no metadata, so the correlation id always travels in
    the wrapped body regardless of the configured format.
    """

    def __init__(
        self,
        connection: RedisConnectionManager,
        *,
        codec: EnvelopeCodec | None = None,
    ) -> None:
        self._connection = connection
        codec = codec or EnvelopeCodec(WireFormat.WRAPPED)
        if codec.wire_format is not WireFormat.WRAPPED:
            codec = EnvelopeCodec(
                WireFormat.WRAPPED,
                precedence=codec.precedence,
                missing_correlation=codec.missing_correlation,
                correlation_key=codec.correlation_key,
            )
        self._codec = codec

    async def publish(self, channel: str, payload: str, correlation_id: str) -> None:
        """PUBLISH the wrapped *payload* on *channel*."""
        logger.info(
            "Publishing to Redis - Channel: %s, CorrelationId: %s",
            channel,
            correlation_id,
        )
        packed = self._codec.pack(payload, correlation_id)
        try:
            receivers = await self._connection.client.publish(channel, packed.body)
        except RelayError:
            raise
        except Exception as e:
            raise TransportFailure(f"Failed to publish to Redis: {e}", channel) from e
        logger.debug("Published to Redis (%s receivers)", receivers)

    async def health_check(self) -> bool:
        return await self._connection.health_check()
