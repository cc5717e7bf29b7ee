"""IOrderStore — volatile order lookup protocol."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from ..domain.models import Order


@runtime_checkable
class IOrderStore(Protocol):
    """
    Keyed order lookup, one entry per order id.

    Implementations must tolerate concurrent ``get``/``put`` from any number
    of listener workers; the last write wins.
    """

    def get(self, order_id: int) -> Order | None: ...

    def put(self, order_id: int, order: Order) -> None: ...
