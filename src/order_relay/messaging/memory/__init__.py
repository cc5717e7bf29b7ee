"""In-memory messaging adapters for testing and single-process demos."""

from __future__ import annotations

from .bus import InMemoryMessageBus
from .consumer import InMemoryConsumer
from .publisher import InMemoryPublisher

__all__ = [
    "InMemoryConsumer",
    "InMemoryMessageBus",
    "InMemoryPublisher",
]
