"""Attempt policies — decide which scheduled attempts actually publish."""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

logger = logging.getLogger("order_relay.scheduling")


@runtime_checkable
class IAttemptPolicy(Protocol):
    def should_publish(self, attempt: int, max_attempts: int) -> bool: ...


class FinalAttemptOnlyPolicy:
    """Every attempt before the last one is treated as a simulated failure."""

    def should_publish(self, attempt: int, max_attempts: int) -> bool:
        if attempt < max_attempts:
            logger.warning(
                "Simulating failure for attempt %d of %d", attempt, max_attempts
            )
            return False
        return True


class EveryAttemptPolicy:
    """Publish on every scheduled attempt."""

    def should_publish(self, attempt: int, max_attempts: int) -> bool:  # noqa: ARG002
        return True
