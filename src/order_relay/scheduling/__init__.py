"""Delayed retry of cancellation publishes."""

from __future__ import annotations

from .asyncio_scheduler import AsyncioDelayScheduler
from .backoff import BackoffSchedule
from .policy import EveryAttemptPolicy, FinalAttemptOnlyPolicy, IAttemptPolicy
from .retry import RetryScheduler

__all__ = [
    "AsyncioDelayScheduler",
    "BackoffSchedule",
    "EveryAttemptPolicy",
    "FinalAttemptOnlyPolicy",
    "IAttemptPolicy",
    "RetryScheduler",
]
