"""Kafka transport binding (optional extra: order-relay[kafka])."""

from __future__ import annotations

from .connection import KafkaConnectionManager
from .consumer import KafkaConsumer
from .publisher import KafkaPublisher

__all__ = [
    "KafkaConnectionManager",
    "KafkaConsumer",
    "KafkaPublisher",
]
