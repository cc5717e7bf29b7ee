"""Redis pub/sub transport binding (optional extra: order-relay[redis])."""

from __future__ import annotations

from .connection import RedisConnectionManager
from .consumer import RedisConsumer
from .publisher import RedisPublisher

__all__ = [
    "RedisConnectionManager",
    "RedisConsumer",
    "RedisPublisher",
]
