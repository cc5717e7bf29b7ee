"""RedisConsumer — IMessageConsumer over Redis pub/sub."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from ...ports.messaging import IMessageConsumer
from ..envelope import InboundMessage

if TYPE_CHECKING:
    from redis.asyncio.client import PubSub

    from ...ports.messaging import MessageHandler
    from .connection import RedisConnectionManager

logger = logging.getLogger("order_relay.messaging.redis")


def to_inbound(message: dict[str, Any]) -> InboundMessage:
    """Normalize a pub/sub ``message`` dict; pub/sub has no headers."""
    channel = message["channel"]
    if isinstance(channel, bytes):
        channel = channel.decode("utf-8")
    return InboundMessage(channel=channel, body=message["data"])


class RedisConsumer(IMessageConsumer):
    """Redis adapter implementing IMessageConsumer.

    Fire-and-forget: messages published while the relay is down are lost.
    """

    def __init__(
        self,
        connection: RedisConnectionManager,
        *,
        poll_timeout: float = 1.0,
        error_backoff: float = 1.0,
    ) -> None:
        self._connection = connection
        self._poll_timeout = poll_timeout
        self._error_backoff = error_backoff
        self._handlers: dict[str, MessageHandler] = {}
        self._pubsub: PubSub | None = None
        self._running = False
        self._task: asyncio.Task[None] | None = None

    async def subscribe(self, channel: str, handler: MessageHandler) -> None:
        """Register handler for *channel*."""
        self._handlers[channel] = handler
        if self._pubsub is not None:
            await self._pubsub.subscribe(channel)

    async def _dispatch(self, message: dict[str, Any]) -> None:
        inbound = to_inbound(message)
        handler = self._handlers.get(inbound.channel)
        if handler is None:
            return
        try:
            await handler(inbound)
        except Exception:
            logger.exception("Unhandled error for Redis channel %s", inbound.channel)

    async def poll_once(self) -> bool:
        """Dispatch at most one pending message; return True if one was handled."""
        if self._pubsub is None:
            self._pubsub = self._connection.client.pubsub()
            await self._pubsub.subscribe(*self._handlers)
            logger.info("Subscribed to Redis channels %s", list(self._handlers))
        message = await self._pubsub.get_message(
            ignore_subscribe_messages=True, timeout=self._poll_timeout
        )
        if message and message["type"] == "message":
            await self._dispatch(message)
            return True
        return False

    async def run(self) -> None:
        """Listen until stopped. Call after subscribe()."""
        self._running = True
        while self._running:
            try:
                handled = await self.poll_once()
            except Exception:
                logger.exception(
                    "Redis poll failed; retrying in %.1fs", self._error_backoff
                )
                await asyncio.sleep(self._error_backoff)
                continue
            if not handled:
                await asyncio.sleep(0.1)

    async def start(self) -> None:
        if self._task is None and self._handlers:
            self._task = asyncio.create_task(self.run())

    async def stop(self) -> None:
        """Stop listening and release the pub/sub connection."""
        self._running = False
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            except Exception:
                logger.exception("Redis listen loop ended with an error")
            self._task = None
        if self._pubsub is not None:
            pubsub, self._pubsub = self._pubsub, None
            try:
                await pubsub.unsubscribe()
            finally:
                await pubsub.aclose()

    async def health_check(self) -> bool:
        return await self._connection.health_check()
