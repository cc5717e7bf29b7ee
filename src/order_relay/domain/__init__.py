from .models import (
    CancellationReference,
    CancelOrderRequest,
    MessageWrapper,
    Order,
    OrderAccepted,
    OrderItem,
    OrderRequest,
    OrderStatus,
    OutForDelivery,
    WireModel,
)

__all__ = [
    "CancelOrderRequest",
    "CancellationReference",
    "MessageWrapper",
    "Order",
    "OrderAccepted",
    "OrderItem",
    "OrderRequest",
    "OrderStatus",
    "OutForDelivery",
    "WireModel",
]
