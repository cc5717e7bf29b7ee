"""In-memory adapters for the store and scheduling ports."""

from __future__ import annotations

from .scheduling import ManualDelayScheduler
from .store import InMemoryOrderStore

__all__ = ["InMemoryOrderStore", "ManualDelayScheduler"]
