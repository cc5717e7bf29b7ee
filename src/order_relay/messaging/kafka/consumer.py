"""KafkaConsumer — IMessageConsumer with a consumer group and manual commit."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from aiokafka import AIOKafkaConsumer

from ...ports.messaging import IMessageConsumer
from ..envelope import InboundMessage, header_text

if TYPE_CHECKING:
    from ...ports.messaging import MessageHandler
    from .connection import KafkaConnectionManager

logger = logging.getLogger("order_relay.messaging.kafka")


def to_inbound(record: Any) -> InboundMessage:
    """Normalize a ConsumerRecord (bytes value + list of byte headers)."""
    headers = {
        key: text
        for key, value in (record.headers or ())
        if (text := header_text(value)) is not None
    }
    return InboundMessage(channel=record.topic, body=record.value, headers=headers)


class KafkaConsumer(IMessageConsumer):
    """Kafka adapter implementing IMessageConsumer.

    All channels share one consumer in one group. Offsets are committed after
    the handler returns, and also after a handler error so a poison record is
    never redelivered. Broker errors are logged and the loop resumes after
    ``error_backoff`` seconds.
    """

    def __init__(
        self,
        connection: KafkaConnectionManager,
        *,
        group_id: str = "order-relay",
        error_backoff: float = 1.0,
    ) -> None:
        self._connection = connection
        self._group_id = group_id
        self._error_backoff = error_backoff
        self._consumer: AIOKafkaConsumer | None = None
        self._handlers: dict[str, MessageHandler] = {}
        self._running = False
        self._task: asyncio.Task[None] | None = None

    async def subscribe(self, channel: str, handler: MessageHandler) -> None:
        """Register handler for the topic *channel*."""
        self._handlers[channel] = handler
        if self._consumer is not None:
            self._consumer.subscribe(list(self._handlers))

    async def _get_consumer(self) -> AIOKafkaConsumer:
        if self._consumer is None:
            consumer = AIOKafkaConsumer(
                *self._handlers,
                group_id=self._group_id,
                enable_auto_commit=False,
                **self._connection.client_config(),
            )
            await consumer.start()
            self._consumer = consumer
        return self._consumer

    async def _handle_record(self, consumer: AIOKafkaConsumer, record: Any) -> None:
        handler = self._handlers.get(record.topic)
        try:
            if handler is not None:
                await handler(to_inbound(record))
        except Exception:
            logger.exception("Unhandled error for Kafka topic %s", record.topic)
        try:
            await consumer.commit()
        except Exception:
            logger.exception("Failed to commit offset for Kafka topic %s", record.topic)

    async def run(self) -> None:
        """Process records until stopped. Call after subscribe()."""
        if not self._handlers:
            return
        self._running = True
        try:
            while self._running:
                try:
                    consumer = await self._get_consumer()
                    async for record in consumer:
                        if not self._running:
                            break
                        await self._handle_record(consumer, record)
                    break
                except Exception:
                    logger.exception(
                        "Kafka consume loop failed; retrying in %.1fs",
                        self._error_backoff,
                    )
                    await asyncio.sleep(self._error_backoff)
        finally:
            self._running = False

    async def start(self) -> None:
        """Run the consume loop as a background task."""
        if self._task is None:
            self._task = asyncio.create_task(self.run())

    async def stop(self) -> None:
        """Stop the consumer loop."""
        self._running = False
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            except Exception:
                logger.exception("Kafka consume loop ended with an error")
            self._task = None
        if self._consumer is not None:
            consumer, self._consumer = self._consumer, None
            await consumer.stop()

    async def health_check(self) -> bool:
        """Return True if the cluster is reachable."""
        return await self._connection.health_check()
