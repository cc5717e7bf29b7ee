"""Relay runtime: build bindings from settings and own their lifecycle."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from .adapters.memory.store import InMemoryOrderStore
from .config import RelaySettings, TransportProtocol
from .listener import InboundListener
from .messaging.envelope import EnvelopeCodec, WireFormat
from .primitives.exceptions import ConfigurationError
from .scheduling.asyncio_scheduler import AsyncioDelayScheduler
from .scheduling.backoff import BackoffSchedule
from .scheduling.retry import RetryScheduler
from .service.processor import OrderProcessor

if TYPE_CHECKING:
    from .messaging.memory.bus import InMemoryMessageBus
    from .ports.messaging import IMessagePublisher
    from .ports.scheduling import IDelayScheduler
    from .ports.store import IOrderStore

logger = logging.getLogger("order_relay.bootstrap")

DEFAULT_WIRE_FORMATS: dict[TransportProtocol, WireFormat] = {
    TransportProtocol.AMQP: WireFormat.WRAPPED,
    TransportProtocol.KAFKA: WireFormat.FLAT,
    TransportProtocol.SQS: WireFormat.WRAPPED,
    TransportProtocol.REDIS: WireFormat.WRAPPED,
    TransportProtocol.MEMORY: WireFormat.FLAT,
}


@dataclass
class Binding:
    """Publisher + consumer for one technology, sharing one connection."""

    protocol: TransportProtocol
    publisher: Any
    consumer: Any
    codec: EnvelopeCodec
    connection: Any = None

    async def start(self) -> None:
        await self.consumer.start()

    async def stop(self) -> None:
        await self.consumer.stop()

    async def close(self) -> None:
        close = getattr(self.publisher, "close", None)
        try:
            if close is not None:
                await close()
        finally:
            if self.connection is not None:
                await self.connection.close()

    async def health_check(self) -> bool:
        try:
            return bool(await self.publisher.health_check())
        except Exception:  # noqa: BLE001
            return False


def codec_for(protocol: TransportProtocol, settings: RelaySettings) -> EnvelopeCodec:
    """Codec for *protocol*; redis is always wrapped since it has no metadata."""
    env = settings.envelope
    wire_format = env.wire_format or DEFAULT_WIRE_FORMATS[protocol]
    if protocol is TransportProtocol.REDIS:
        wire_format = WireFormat.WRAPPED
    return EnvelopeCodec(
        wire_format,
        precedence=env.correlation_precedence,
        missing_correlation=env.missing_correlation,
    )


def create_binding(
    protocol: TransportProtocol | str,
    settings: RelaySettings,
    *,
    bus: InMemoryMessageBus | None = None,
) -> Binding:
    """Build the binding for *protocol*, importing its client library lazily.

    Raises:
        ConfigurationError: unknown protocol.
    """
    try:
        protocol = TransportProtocol(protocol)
    except ValueError as e:
        raise ConfigurationError(f"Unknown transport protocol: {protocol!r}") from e
    codec = codec_for(protocol, settings)

    if protocol is TransportProtocol.MEMORY:
        from .messaging.memory import InMemoryConsumer, InMemoryMessageBus, InMemoryPublisher

        shared_bus = bus or InMemoryMessageBus()
        return Binding(
            protocol,
            InMemoryPublisher(shared_bus, codec=codec),
            InMemoryConsumer(shared_bus),
            codec,
        )
    if protocol is TransportProtocol.AMQP:
        from .messaging.rabbitmq import (
            RabbitMQConnectionManager,
            RabbitMQConsumer,
            RabbitMQPublisher,
        )

        amqp = settings.amqp
        rabbit = RabbitMQConnectionManager(amqp.url)
        return Binding(
            protocol,
            RabbitMQPublisher(rabbit, exchange_name=amqp.exchange_name, codec=codec),
            RabbitMQConsumer(
                rabbit,
                exchange_name=amqp.exchange_name,
                prefetch_count=amqp.prefetch_count,
            ),
            codec,
            rabbit,
        )
    if protocol is TransportProtocol.KAFKA:
        from .messaging.kafka import KafkaConnectionManager, KafkaConsumer, KafkaPublisher

        kafka = settings.kafka
        kafka_conn = KafkaConnectionManager(
            kafka.bootstrap_servers, **kafka.client_options
        )
        return Binding(
            protocol,
            KafkaPublisher(kafka_conn, codec=codec),
            KafkaConsumer(kafka_conn, group_id=kafka.group_id),
            codec,
            kafka_conn,
        )
    if protocol is TransportProtocol.SQS:
        from .messaging.sqs import SQSConnectionManager, SQSConsumer, SQSPublisher

        sqs = settings.sqs
        sqs_conn = SQSConnectionManager(sqs.region_name, **sqs.client_kwargs())
        return Binding(
            protocol,
            SQSPublisher(sqs_conn, codec=codec),
            SQSConsumer(
                sqs_conn,
                wait_time_seconds=sqs.wait_time_seconds,
                visibility_timeout=sqs.visibility_timeout,
            ),
            codec,
            sqs_conn,
        )
    from .messaging.redis import RedisConnectionManager, RedisConsumer, RedisPublisher

    redis_conn = RedisConnectionManager(settings.redis.url)
    return Binding(
        protocol,
        RedisPublisher(redis_conn, codec=codec),
        RedisConsumer(redis_conn),
        codec,
        redis_conn,
    )


@dataclass
class OrderRelay:
    """One inbound binding, one outbound binding and everything between them.

    Usage::

        relay = OrderRelay.from_settings(RelaySettings.from_env())
        await relay.start()
        ...
        await relay.stop()
    """

    settings: RelaySettings
    inbound: Binding
    outbound: Binding
    store: IOrderStore
    processor: OrderProcessor
    listener: InboundListener
    scheduler: IDelayScheduler
    retry_scheduler: RetryScheduler | None = None
    _started: bool = field(default=False, init=False, repr=False)

    @classmethod
    def from_settings(
        cls,
        settings: RelaySettings,
        *,
        store: IOrderStore | None = None,
        scheduler: IDelayScheduler | None = None,
        bus: InMemoryMessageBus | None = None,
    ) -> OrderRelay:
        inbound = create_binding(settings.receive_protocol, settings, bus=bus)
        if settings.send_protocol == settings.receive_protocol:
            outbound = inbound
        else:
            outbound = create_binding(settings.send_protocol, settings, bus=bus)

        store = store or InMemoryOrderStore()
        scheduler = scheduler or AsyncioDelayScheduler(settings.retry.concurrency)
        retry_scheduler = None
        if settings.retry.enabled:
            retry = settings.retry
            retry_scheduler = RetryScheduler(
                scheduler,
                inbound.publisher,
                backoff=BackoffSchedule(
                    retry.initial_delay_seconds, retry.multiplier, retry.buffer_seconds
                ),
                max_attempts=retry.max_attempts,
            )
        processor = OrderProcessor(
            store,
            outbound.publisher,
            retry_scheduler=retry_scheduler,
            channels=settings.channels,
            retry=settings.retry,
            accepted_correlation_id=settings.accepted_correlation_id,
        )
        listener = InboundListener(inbound.consumer, processor, codec=inbound.codec)
        logger.info(
            "Relay configured: receive=%s send=%s",
            settings.receive_protocol.value,
            settings.send_protocol.value,
        )
        return cls(
            settings=settings,
            inbound=inbound,
            outbound=outbound,
            store=store,
            processor=processor,
            listener=listener,
            scheduler=scheduler,
            retry_scheduler=retry_scheduler,
        )

    def _bindings(self) -> list[Binding]:
        if self.outbound is self.inbound:
            return [self.inbound]
        return [self.inbound, self.outbound]

    async def start(self) -> None:
        """Subscribe the listener and start the inbound consumer loop."""
        if self._started:
            return
        await self.listener.start()
        await self.inbound.start()
        self._started = True
        logger.info("Relay started")

    async def stop(self) -> None:
        """Stop consuming, cancel pending retries, close connections.

        Every step runs even if an earlier one fails; failures are logged.
        """
        if self._started:
            self._started = False
            try:
                await self.inbound.stop()
            except Exception:
                logger.exception("Failed to stop inbound consumer")
            await self.listener.stop()
        aclose = getattr(self.scheduler, "aclose", None)
        if aclose is not None:
            try:
                await aclose()
            except Exception:
                logger.exception("Failed to cancel pending retries")
        for binding in self._bindings():
            try:
                await binding.close()
            except Exception:
                logger.exception("Failed to close %s binding", binding.protocol.value)
        logger.info("Relay stopped")

    async def health(self) -> dict[str, Any]:
        inbound_ok, outbound_ok = await asyncio.gather(
            self.inbound.health_check(), self.outbound.health_check()
        )
        return {
            "status": "ok" if inbound_ok and outbound_ok else "degraded",
            "inbound": inbound_ok,
            "outbound": outbound_ok,
        }
