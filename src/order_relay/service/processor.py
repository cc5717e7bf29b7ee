"""OrderProcessor — business rules for every inbound order event."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..config import ChannelSettings, RetrySettings
from ..domain.models import (
    CancellationReference,
    CancelOrderRequest,
    Order,
    OrderAccepted,
    OrderRequest,
    OrderStatus,
    OutForDelivery,
)
from ..messaging.serialization import PayloadSerializer

if TYPE_CHECKING:
    from ..domain.models import WireModel
    from ..ports.messaging import IMessagePublisher
    from ..ports.store import IOrderStore
    from ..scheduling.retry import RetryScheduler

logger = logging.getLogger("order_relay.service")


class OrderProcessor:
    """Turns inbound events into outbound events and lookup updates.

    Collaborators are injected; nothing here knows which transport is in use.
    Publish failures (``TransportFailure``) and encode failures
    (``SerializationFailure``) propagate to the caller.
    """

    def __init__(
        self,
        store: IOrderStore,
        publisher: IMessagePublisher | None = None,
        *,
        retry_scheduler: RetryScheduler | None = None,
        channels: ChannelSettings | None = None,
        retry: RetrySettings | None = None,
        accepted_correlation_id: str = "12345",
        serializer: PayloadSerializer | None = None,
    ) -> None:
        self._store = store
        self._publisher = publisher
        self._retry_scheduler = retry_scheduler
        self._channels = channels or ChannelSettings()
        self._retry = retry or RetrySettings()
        self._accepted_correlation_id = accepted_correlation_id
        self._serializer = serializer or PayloadSerializer()

    @property
    def channels(self) -> ChannelSettings:
        return self._channels

    async def _publish(self, channel: str, event: WireModel, correlation_id: str) -> bool:
        payload = self._serializer.serialize(event)
        if self._publisher is None:
            logger.warning("No outbound publisher configured; not publishing to %s", channel)
            return False
        await self._publisher.publish(channel, payload, correlation_id)
        return True

    async def process_new_order(self, request: OrderRequest, correlation_id: str) -> Order:
        """Price the order and announce it on the work-in-progress channel."""
        logger.info("Processing new order: %s", request.id)
        total = request.total_amount()
        order = Order(id=request.id, total_amount=total, status=OrderStatus.INITIATED)
        if await self._publish(self._channels.wip_orders, order, correlation_id):
            logger.info("Order %s initiated with total amount: %s", order.id, total)
        return order

    def _diverts_to_retry(self, order_id: int) -> bool:
        return (
            self._retry.enabled
            and self._retry.sentinel_order_id is not None
            and order_id == self._retry.sentinel_order_id
        )

    async def process_cancel_order(
        self, request: CancelOrderRequest, correlation_id: str
    ) -> CancellationReference | None:
        """Confirm a cancellation, or hand the sentinel id to the retry path.

        Returns None when the request was diverted to the retry scheduler.
        """
        logger.info("Processing cancel order request: %s", request.id)
        if self._diverts_to_retry(request.id):
            if self._retry_scheduler is None:
                logger.warning(
                    "Retry scheduler not configured; cancel request %s dropped",
                    request.id,
                )
                return None
            logger.info(
                "Simulating initial failure for order %s, scheduling async retries",
                request.id,
            )
            self._retry_scheduler.schedule(
                self._channels.retry_failed_cancelled_orders,
                self._serializer.serialize(request),
                correlation_id,
            )
            return None
        reference = CancellationReference(reference=request.id)
        if await self._publish(self._channels.cancelled_orders, reference, correlation_id):
            logger.info("Order %s cancelled", request.id)
        return reference

    async def process_retry_failed_cancel_order(
        self, request: CancelOrderRequest, correlation_id: str
    ) -> CancellationReference:
        """Confirm a replayed cancellation; never diverted again."""
        logger.info("Processing retry failed cancel order request: %s", request.id)
        reference = CancellationReference(reference=request.id)
        if await self._publish(self._channels.cancelled_orders, reference, correlation_id):
            logger.info("Retry successful - Order %s cancelled", request.id)
        return reference

    async def process_order_delivery(self, info: OutForDelivery) -> Order:
        logger.info("Processing order delivery initiation for order: %s", info.order_id)
        order = Order(id=info.order_id, total_amount=None, status=OrderStatus.SHIPPED)
        self.save_order(info.order_id, order)
        logger.info("Order %s marked as shipped", info.order_id)
        return order

    async def accept_order(
        self, event: OrderAccepted, correlation_id: str | None = None
    ) -> None:
        """Publish *event* verbatim on the accepted-orders channel."""
        await self._publish(
            self._channels.accepted_orders,
            event,
            correlation_id or self._accepted_correlation_id,
        )
        logger.info("Order %s has been accepted", event.id)

    def save_order(self, order_id: int, order: Order) -> None:
        logger.info("Saving order %s to in-memory lookup", order_id)
        self._store.put(order_id, order)

    def get_order(self, order_id: int) -> Order | None:
        return self._store.get(order_id)
