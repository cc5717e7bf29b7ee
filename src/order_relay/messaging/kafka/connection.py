"""Kafka client options shared by the relay's producer, consumer and health probe."""

from __future__ import annotations

import contextlib
import logging
from typing import Any

from aiokafka.admin import AIOKafkaAdminClient

logger = logging.getLogger("order_relay.messaging.kafka")

# Set by KafkaConsumer itself; never taken from client options.
RELAY_MANAGED_OPTIONS = frozenset({"group_id", "enable_auto_commit"})


class KafkaConnectionManager:
    """Bootstrap servers plus the ``kafka.client_options`` every client shares.

    Kafka has no connection object to share: the publisher owns a producer
    and the consumer owns a group member, both built from
    :meth:`client_config`. Only the admin client used for health probes is
    held here, created on first probe and released by :meth:`close`.
    """

    def __init__(
        self,
        bootstrap_servers: str | list[str] = "localhost:9092",
        **client_options: Any,
    ) -> None:
        ignored = sorted(RELAY_MANAGED_OPTIONS & client_options.keys())
        if ignored:
            logger.warning("Ignoring Kafka client options set by the relay: %s", ignored)
        self._bootstrap_servers = bootstrap_servers
        self._options = {
            k: v for k, v in client_options.items() if k not in RELAY_MANAGED_OPTIONS
        }
        self._admin: AIOKafkaAdminClient | None = None

    @property
    def bootstrap_servers(self) -> str | list[str]:
        return self._bootstrap_servers

    def client_config(self) -> dict[str, Any]:
        """Keyword arguments for AIOKafkaProducer / AIOKafkaConsumer."""
        return {"bootstrap_servers": self._bootstrap_servers, **self._options}

    async def _get_admin(self) -> AIOKafkaAdminClient:
        if self._admin is None:
            admin = AIOKafkaAdminClient(**self.client_config())
            await admin.start()
            self._admin = admin
        return self._admin

    async def close(self) -> None:
        """Release the health-probe admin client."""
        if self._admin is not None:
            admin, self._admin = self._admin, None
            await admin.close()

    async def health_check(self) -> bool:
        """Return True if the cluster answers a topic listing."""
        try:
            admin = await self._get_admin()
            await admin.list_topics()
        except Exception:  # noqa: BLE001
            logger.warning("Kafka health check failed", exc_info=True)
            # a broken admin client is rebuilt on the next probe
            with contextlib.suppress(Exception):
                await self.close()
            return False
        return True
