from .messaging import IMessageConsumer, IMessagePublisher, IRetryMessagePublisher
from .scheduling import IDelayScheduler
from .store import IOrderStore

__all__ = [
    "IDelayScheduler",
    "IMessageConsumer",
    "IMessagePublisher",
    "IOrderStore",
    "IRetryMessagePublisher",
]
