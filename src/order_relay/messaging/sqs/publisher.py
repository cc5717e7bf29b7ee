"""SQSPublisher — IMessagePublisher with the correlation id as a message attribute."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from ...ports.messaging import IMessagePublisher
from ...primitives.exceptions import RelayError, TransportFailure
from ..envelope import EnvelopeCodec, WireFormat

if TYPE_CHECKING:
    from .connection import SQSConnectionManager

logger = logging.getLogger("order_relay.messaging.sqs")


def to_message_attributes(headers: dict[str, str]) -> dict[str, Any]:
    """SQS rejects empty string attributes, so blank headers are dropped."""
    return {
        key: {"DataType": "String", "StringValue": value}
        for key, value in headers.items()
        if value
    }


class SQSPublisher(IMessagePublisher):
    """SQS adapter implementing IMessagePublisher.

    The channel is used as queue name. FIFO queues get the correlation id as
    deduplication id and a single message group.
    """

    def __init__(
        self,
        connection: SQSConnectionManager,
        *,
        codec: EnvelopeCodec | None = None,
    ) -> None:
        """Configure publisher.

        Args:
            connection: Shared connection manager.
            codec: Frames the payload; default wrapped codec.
        """
        self._connection = connection
        self._codec = codec or EnvelopeCodec(WireFormat.WRAPPED)

    async def publish(self, channel: str, payload: str, correlation_id: str) -> None:
        """Send *payload* to the queue named *channel*."""
        logger.info(
            "Publishing to SQS - Queue: %s, CorrelationId: %s",
            channel,
            correlation_id,
        )
        packed = self._codec.pack(payload, correlation_id)
        try:
            queue_url = await self._connection.get_queue_url(channel)
            client = await self._connection.get_client()
            send_kwargs: dict[str, Any] = {
                "QueueUrl": queue_url,
                "MessageBody": packed.body.decode("utf-8"),
                "MessageAttributes": to_message_attributes(packed.headers),
            }
            if queue_url.endswith(".fifo"):
                send_kwargs["MessageGroupId"] = "orders"
                if correlation_id:
                    send_kwargs["MessageDeduplicationId"] = correlation_id
            await client.send_message(**send_kwargs)
        except RelayError:
            raise
        except Exception as e:
            raise TransportFailure(f"Failed to publish to SQS: {e}", channel) from e
        logger.debug("Published to SQS successfully")

    async def health_check(self) -> bool:
        """Return True if SQS is reachable."""
        return await self._connection.health_check()
