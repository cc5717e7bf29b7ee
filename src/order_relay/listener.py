"""InboundListener — subscribe to the inbound channels and feed the processor."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from .correlation import correlation_scope
from .domain.models import CancelOrderRequest, OrderRequest, OutForDelivery
from .messaging.envelope import EnvelopeCodec
from .messaging.serialization import PayloadSerializer
from .primitives.exceptions import DecodeFailure, RelayError

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from .domain.models import WireModel
    from .messaging.envelope import InboundMessage
    from .ports.messaging import IMessageConsumer
    from .service.processor import OrderProcessor

logger = logging.getLogger("order_relay.listener")


@dataclass(frozen=True)
class _Route:
    event_type: type[WireModel]
    handle: Callable[[Any, str | None], Awaitable[Any]]
    require_correlation: bool = True


class InboundListener:
    """One listener for every transport.

    Each delivery is unwrapped by the codec, decoded into the channel's event
    type and forwarded to the processor. Every error is logged and swallowed
    so the transport never redelivers a message the relay could not handle.

    Usage::

        listener = InboundListener(consumer, processor, codec=codec)
        await listener.start()
    """

    def __init__(
        self,
        consumer: IMessageConsumer,
        processor: OrderProcessor,
        *,
        codec: EnvelopeCodec | None = None,
        serializer: PayloadSerializer | None = None,
    ) -> None:
        self._consumer = consumer
        self._processor = processor
        self._codec = codec or EnvelopeCodec()
        self._serializer = serializer or PayloadSerializer()
        # same order as ChannelSettings.inbound()
        routes = [
            _Route(OrderRequest, processor.process_new_order),
            _Route(CancelOrderRequest, processor.process_cancel_order),
            _Route(CancelOrderRequest, processor.process_retry_failed_cancel_order),
            _Route(
                OutForDelivery,
                lambda info, _cid: processor.process_order_delivery(info),
                require_correlation=False,
            ),
        ]
        self._routes: dict[str, _Route] = dict(
            zip(processor.channels.inbound(), routes, strict=True)
        )
        self._running = False

    @property
    def channels(self) -> list[str]:
        return list(self._routes)

    async def start(self) -> None:
        """Subscribe to every inbound channel."""
        if self._running:
            return
        self._running = True
        for channel in self._routes:
            await self._consumer.subscribe(channel, self.handle_message)
        logger.info("Listening on channels: %s", list(self._routes))

    async def stop(self) -> None:
        self._running = False
        logger.info("Inbound listener stopped")

    async def handle_message(self, message: InboundMessage) -> None:
        """Decode and forward one delivery. Never raises."""
        route = self._routes.get(message.channel)
        if route is None:
            logger.warning("No route for channel %s; message dropped", message.channel)
            return
        try:
            decoded = self._codec.extract(
                message, require_correlation=route.require_correlation
            )
            with correlation_scope(decoded.correlation_id):
                logger.info(
                    "Received message on %s - CorrelationId: %s",
                    message.channel,
                    decoded.correlation_id,
                )
                event = self._serializer.deserialize(
                    decoded.payload, route.event_type, channel=message.channel
                )
                await route.handle(event, decoded.correlation_id)
        except DecodeFailure:
            logger.exception("Dropping undecodable message on %s", message.channel)
        except RelayError:
            logger.exception("Failed to relay message from %s", message.channel)
        except Exception:
            logger.exception("Unexpected error handling message on %s", message.channel)
