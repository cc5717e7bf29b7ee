"""In-memory message bus for testing — connects publisher and consumer."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..envelope import InboundMessage

if TYPE_CHECKING:
    from ...ports.messaging import MessageHandler


class InMemoryMessageBus:
    """Shared bus: publish records frames and
    synchronously invokes registered handlers."""

    def __init__(self) -> None:
        self._messages: list[InboundMessage] = []
        self._handlers: dict[str, list[MessageHandler]] = {}

    def register(self, channel: str, handler: MessageHandler) -> None:
        """Register a handler for the channel."""
        self._handlers.setdefault(channel, []).append(handler)

    async def deliver(self, message: InboundMessage) -> None:
        """Record *message* and invoke all handlers for its channel."""
        self._messages.append(message)
        for h in self._handlers.get(message.channel, []):
            await h(message)

    def get_published(self, channel: str | None = None) -> list[InboundMessage]:
        """Return published frames in order, optionally for one channel."""
        if channel is None:
            return list(self._messages)
        return [m for m in self._messages if m.channel == channel]

    def clear(self) -> None:
        """Clear published messages and handlers (for test teardown)."""
        self._messages.clear()
        self._handlers.clear()
