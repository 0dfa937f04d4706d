"""Retry policy for the rootfs sync-and-verify loop."""

import time
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class RetryPolicy:
    """How often and how fast a failed rootfs verification is retried.

    ``max_attempts`` of ``None`` retries forever. The delay before retry ``n``
    (1-based) is ``backoff_seconds * backoff_factor ** (n - 1)``, capped at
    ``max_backoff_seconds``.
    """

    max_attempts: Optional[int] = None
    backoff_seconds: float = 0.0
    backoff_factor: float = 2.0
    max_backoff_seconds: float = 300.0

    @classmethod
    def unbounded(cls) -> "RetryPolicy":
        return cls()

    @property
    def bounded(self) -> bool:
        return self.max_attempts is not None

    def should_retry(self, failed_attempts: int) -> bool:
        if self.max_attempts is None:
            return True
        return failed_attempts < self.max_attempts

    def delay(self, retry_number: int) -> float:
        if self.backoff_seconds <= 0:
            return 0.0
        delay = self.backoff_seconds * (self.backoff_factor ** max(0, retry_number - 1))
        return min(delay, self.max_backoff_seconds)

    def wait(self, retry_number: int, sleep=time.sleep):
        delay = self.delay(retry_number)
        if delay > 0:
            sleep(delay)
        return delay
