"""RetryScheduler — delayed, backed-off republish through the retry publisher."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .backoff import BackoffSchedule
from .policy import FinalAttemptOnlyPolicy, IAttemptPolicy

if TYPE_CHECKING:
    from ..ports.messaging import IRetryMessagePublisher
    from ..ports.scheduling import IDelayScheduler

logger = logging.getLogger("order_relay.scheduling")


class RetryScheduler:
    """Schedules ``max_attempts`` independent attempts for one payload.

    Attempt *n* fires ``backoff.delay(n)`` seconds after :meth:`schedule` is
    called; whether it publishes is up to the attempt policy. Attempts are
    never chained: a failed publish does not schedule another one.
    """

    def __init__(
        self,
        scheduler: IDelayScheduler,
        publisher: IRetryMessagePublisher | None,
        *,
        backoff: BackoffSchedule | None = None,
        max_attempts: int = 3,
        policy: IAttemptPolicy | None = None,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        self._scheduler = scheduler
        self._publisher = publisher
        self._backoff = backoff or BackoffSchedule()
        self._max_attempts = max_attempts
        self._policy = policy or FinalAttemptOnlyPolicy()
        self.scheduled_attempts = 0

    @property
    def max_attempts(self) -> int:
        return self._max_attempts

    @property
    def backoff(self) -> BackoffSchedule:
        return self._backoff

    def schedule(self, channel: str, payload: str, correlation_id: str) -> list[float]:
        """Schedule every attempt and return their delays. Never blocks."""
        delays = self._backoff.delays(self._max_attempts)
        for attempt, delay in enumerate(delays, start=1):
            logger.info(
                "Scheduling retry attempt %d in %.1f seconds (channel=%s)",
                attempt,
                delay,
                channel,
            )

            async def run_attempt(n: int = attempt) -> None:
                await self._attempt(n, channel, payload, correlation_id)

            self._scheduler.schedule_after(delay, run_attempt)
            self.scheduled_attempts += 1
        return delays

    async def _attempt(
        self, attempt: int, channel: str, payload: str, correlation_id: str
    ) -> None:
        logger.info("Executing retry attempt %d for channel %s", attempt, channel)
        if not self._policy.should_publish(attempt, self._max_attempts):
            return
        if self._publisher is None:
            logger.warning(
                "No retry publisher configured; dropping attempt %d for %s",
                attempt,
                channel,
            )
            return
        try:
            await self._publisher.publish(channel, payload, correlation_id)
        except Exception:
            logger.exception("Retry attempt %d failed for channel %s", attempt, channel)
            return
        logger.info("Retry attempt %d published to %s", attempt, channel)
