"""
Timeout escalation and backoff schedule for the retrying invoker.

Attempt n gets BASE_TIMEOUT_MS + n * TIMEOUT_INCREMENT_MS (15s, 20s, 25s
with the defaults) and waits BASE_DELAY_MS * n before the next attempt.
Both grow linearly, so the total wait stays bounded.
"""

from dataclasses import dataclass

from inventory_client.config import Settings


@dataclass(frozen=True)
class RetryPolicy:
    """
    Attempt budget, per-attempt timeouts and inter-attempt delays.

    Attributes:
        max_attempts: Physical attempts allowed for one logical call
        base_timeout_ms: Timeout floor for every attempt
        timeout_increment_ms: Extra timeout per attempt number
        base_delay_ms: Backoff unit (delay after attempt n is n units)
    """

    max_attempts: int = 3
    base_timeout_ms: int = 10000
    timeout_increment_ms: int = 5000
    base_delay_ms: int = 1000

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("RetryPolicy.max_attempts must be >= 1")
        if self.base_timeout_ms <= 0:
            raise ValueError("RetryPolicy.base_timeout_ms must be > 0")
        if self.timeout_increment_ms < 0:
            raise ValueError("RetryPolicy.timeout_increment_ms must be >= 0")
        if self.base_delay_ms < 0:
            raise ValueError("RetryPolicy.base_delay_ms must be >= 0")

    @classmethod
    def from_settings(cls, settings: Settings) -> "RetryPolicy":
        return cls(
            max_attempts=settings.MAX_ATTEMPTS,
            base_timeout_ms=settings.BASE_TIMEOUT_MS,
            timeout_increment_ms=settings.TIMEOUT_INCREMENT_MS,
            base_delay_ms=settings.BASE_DELAY_MS,
        )

    def attempt_timeout_ms(self, attempt: int) -> int:
        """Timeout budget of attempt `attempt` (1-based)."""
        return self.base_timeout_ms + attempt * self.timeout_increment_ms

    def backoff_delay_ms(self, attempt: int) -> int:
        """Delay to wait after failed attempt `attempt` (1-based)."""
        return self.base_delay_ms * attempt
