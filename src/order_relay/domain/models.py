"""Order events and entities exchanged over every transport.

Field names are camelCase on the wire and snake_case in Python. Models are
immutable; unknown JSON fields sent by producers are ignored.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class OrderStatus(str, Enum):
    """Order lifecycle states, serialized by name."""

    PENDING = "PENDING"
    INITIATED = "INITIATED"
    ACCEPTED = "ACCEPTED"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"


class WireModel(BaseModel):
    """Base for every payload entity: camelCase aliases, frozen, lenient input."""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
        extra="ignore",
    )

    def to_json(self) -> str:
        """Encode with wire (camelCase) field names."""
        return self.model_dump_json(by_alias=True)


class OrderItem(WireModel):
    price: float
    quantity: int
    id: int | None = None
    name: str | None = None


class OrderRequest(WireModel):
    """A new order as received on the new-orders channel."""

    id: int
    order_items: list[OrderItem] = Field(default_factory=list)

    def total_amount(self) -> float:
        """Sum of ``price * quantity`` over the line items, in item order."""
        total = 0.0
        for item in self.order_items:
            total += item.price * item.quantity
        return total


class CancelOrderRequest(WireModel):
    id: int


class OutForDelivery(WireModel):
    order_id: int
    delivery_address: str
    delivery_date: str


class Order(WireModel):
    """The only entity with a lifecycle; kept in the volatile order lookup."""

    id: int
    total_amount: float | None = None
    status: OrderStatus


class CancellationReference(WireModel):
    reference: int
    status: OrderStatus = OrderStatus.CANCELLED


class OrderAccepted(WireModel):
    id: int
    status: OrderStatus
    timestamp: str


class MessageWrapper(WireModel):
    """Payload-level envelope: ``{"orderCorrelationId": ..., "payload": ...}``."""

    order_correlation_id: str | None = None
    payload: Any = None
