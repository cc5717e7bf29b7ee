"""order-relay — transport-agnostic order event relay."""

from __future__ import annotations

from .bootstrap import OrderRelay, create_binding
from .config import RelaySettings, TransportProtocol
from .domain.models import (
    CancellationReference,
    CancelOrderRequest,
    Order,
    OrderAccepted,
    OrderItem,
    OrderRequest,
    OrderStatus,
    OutForDelivery,
)
from .listener import InboundListener
from .primitives.exceptions import (
    ConfigurationError,
    DecodeFailure,
    RelayError,
    SerializationFailure,
    TransportConnectionError,
    TransportFailure,
    UnsupportedEnvelope,
)
from .service.processor import OrderProcessor

__version__ = "0.1.0"

__all__ = [
    "CancelOrderRequest",
    "CancellationReference",
    "ConfigurationError",
    "DecodeFailure",
    "InboundListener",
    "Order",
    "OrderAccepted",
    "OrderItem",
    "OrderProcessor",
    "OrderRelay",
    "OrderRequest",
    "OrderStatus",
    "OutForDelivery",
    "RelayError",
    "RelaySettings",
    "SerializationFailure",
    "TransportConnectionError",
    "TransportFailure",
    "TransportProtocol",
    "UnsupportedEnvelope",
    "create_binding",
]
