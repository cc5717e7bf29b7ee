"""SQSConsumer — IMessageConsumer with long-polling."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from ...ports.messaging import IMessageConsumer
from ..envelope import InboundMessage

if TYPE_CHECKING:
    from ...ports.messaging import MessageHandler
    from .connection import SQSConnectionManager

logger = logging.getLogger("order_relay.messaging.sqs")


def to_inbound(channel: str, msg: dict[str, Any]) -> InboundMessage:
    """Normalize a received SQS message (text body + string attributes)."""
    headers = {
        key: str(attr["StringValue"])
        for key, attr in (msg.get("MessageAttributes") or {}).items()
        if attr.get("StringValue") is not None
    }
    return InboundMessage(channel=channel, body=msg.get("Body", ""), headers=headers)


class SQSConsumer(IMessageConsumer):
    """SQS adapter implementing IMessageConsumer.

    Long-polling via WaitTimeSeconds. Messages are deleted after the handler
    runs, whether or not it raised, so nothing is redelivered.
    """

    def __init__(
        self,
        connection: SQSConnectionManager,
        *,
        wait_time_seconds: int = 20,
        visibility_timeout: int = 30,
        error_backoff: float = 1.0,
    ) -> None:
        """Configure consumer.

        Args:
            connection: Shared connection manager.
            wait_time_seconds: Long-poll wait.
            visibility_timeout: Visibility timeout for received messages.
            error_backoff: Seconds to wait after a failed receive or poll.
        """
        self._connection = connection
        self._wait_time_seconds = wait_time_seconds
        self._visibility_timeout = visibility_timeout
        self._error_backoff = error_backoff
        self._handlers: dict[str, MessageHandler] = {}
        self._running = False
        self._task: asyncio.Task[None] | None = None

    async def subscribe(self, channel: str, handler: MessageHandler) -> None:
        """Register handler for the queue named *channel*."""
        self._handlers[channel] = handler

    async def _process_message(
        self,
        client: Any,
        queue_url: str,
        channel: str,
        msg: dict[str, Any],
        handler: MessageHandler,
    ) -> None:
        try:
            await handler(to_inbound(channel, msg))
        except Exception:
            logger.exception("Unhandled error for SQS queue %s", channel)
        try:
            await client.delete_message(
                QueueUrl=queue_url,
                ReceiptHandle=msg["ReceiptHandle"],
            )
        except Exception:
            logger.exception("Failed to delete message from SQS queue %s", channel)

    async def poll_once(self) -> int:
        """Receive one batch from every subscribed queue; return messages handled."""
        client = await self._connection.get_client()
        handled = 0
        for channel, handler in list(self._handlers.items()):
            try:
                queue_url = await self._connection.get_queue_url(channel)
                out = await client.receive_message(
                    QueueUrl=queue_url,
                    MaxNumberOfMessages=10,
                    WaitTimeSeconds=self._wait_time_seconds,
                    VisibilityTimeout=self._visibility_timeout,
                    MessageAttributeNames=["All"],
                )
            except Exception:
                logger.exception("Failed to receive from SQS queue %s", channel)
                await asyncio.sleep(self._error_backoff)
                continue
            for msg in out.get("Messages", []):
                await self._process_message(client, queue_url, channel, msg, handler)
                handled += 1
        return handled

    async def run(self) -> None:
        """Poll SQS and dispatch to handlers. Call after subscribe()."""
        self._running = True
        while self._running:
            try:
                await self.poll_once()
            except Exception:
                logger.exception(
                    "SQS poll failed; retrying in %.1fs", self._error_backoff
                )
                await asyncio.sleep(self._error_backoff)

    async def start(self) -> None:
        """Run the polling loop as a background task."""
        if self._task is None and self._handlers:
            self._task = asyncio.create_task(self.run())

    async def stop(self) -> None:
        """Stop the polling loop."""
        self._running = False
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            except Exception:
                logger.exception("SQS polling loop ended with an error")
            self._task = None

    async def health_check(self) -> bool:
        """Return True if SQS is reachable."""
        return await self._connection.health_check()
