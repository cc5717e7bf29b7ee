from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from ..messaging.envelope import InboundMessage

    MessageHandler = Callable[[InboundMessage], Awaitable[None]]


@runtime_checkable
class IMessagePublisher(Protocol):
    """
    Port for publishing order events to a transport (RabbitMQ, Kafka, SQS, …).

    Transport packages provide concrete adapters.
    """

    async def publish(self, channel: str, payload: str, correlation_id: str) -> None:
        """
        Publish *payload* to *channel*.

        Args:
            channel: Queue, topic or routing key name.
            payload: Encoded event (UTF-8 JSON text).
            correlation_id: Carried as transport metadata, never inside
                the payload.

        Raises:
            TransportFailure: when the broker rejects or cannot be reached.
        """
        ...


@runtime_checkable
class IRetryMessagePublisher(Protocol):
    """
    Port used only by the cancellation retry path.

    The runtime binds it to the technology the relay *receives* on, so a
    replayed cancellation arrives back on the same transport.
    """

    async def publish(self, channel: str, payload: str, correlation_id: str) -> None:
        ...


@runtime_checkable
class IMessageConsumer(Protocol):
    """
    Port for subscribing to inbound channels.

    Adapters normalize native frames into
    :class:`~order_relay.messaging.envelope.InboundMessage` before calling
    the handler.
    """

    async def subscribe(self, channel: str, handler: MessageHandler) -> None:
        """
        Subscribe *handler* to *channel*.

        Args:
            channel: Queue or topic to consume.
            handler: Async callable invoked for each message.
        """
        ...
