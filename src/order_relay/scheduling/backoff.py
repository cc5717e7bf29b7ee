"""BackoffSchedule — exponential delay per 1-based attempt, plus a buffer."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class BackoffSchedule:
    """``delay(n) = initial_delay * multiplier ** (n - 1) + buffer``.

    The buffer keeps attempts from landing exactly on the backoff boundary.
    """

    initial_delay: float = 5.0
    multiplier: float = 2.0
    buffer: float = 2.0

    def __post_init__(self) -> None:
        if self.initial_delay < 0 or self.buffer < 0:
            raise ValueError("initial_delay and buffer must be >= 0")
        if self.multiplier <= 0:
            raise ValueError("multiplier must be > 0")

    def delay(self, attempt: int) -> float:
        """Return the delay in seconds for *attempt* (1-based)."""
        if attempt < 1:
            raise ValueError(f"attempt must be >= 1, got {attempt}")
        return self.initial_delay * self.multiplier ** (attempt - 1) + self.buffer

    def delays(self, max_attempts: int) -> list[float]:
        return [self.delay(n) for n in range(1, max_attempts + 1)]
