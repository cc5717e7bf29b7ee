"""InMemoryOrderStore — volatile order lookup."""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING

from ...ports.store import IOrderStore

if TYPE_CHECKING:
    from ...domain.models import Order


class InMemoryOrderStore(IOrderStore):
    """Lock-guarded dict keyed by order id. Last write wins; lost on restart."""

    def __init__(self) -> None:
        self._orders: dict[int, Order] = {}
        self._lock = threading.Lock()

    def get(self, order_id: int) -> Order | None:
        with self._lock:
            return self._orders.get(order_id)

    def put(self, order_id: int, order: Order) -> None:
        with self._lock:
            self._orders[order_id] = order

    # --- Test helpers ---

    def clear(self) -> None:
        with self._lock:
            self._orders.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._orders)
