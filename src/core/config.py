"""Core configuration dataclasses.

We keep config parsing outside the core, but these dataclasses define the
shape the core expects so adapters and app layers can build safely.
"""

from __future__ import annotations

from dataclasses import dataclass

from core.retry import RetryPolicy


@dataclass(frozen=True)
class FetchConfig:
    """History paging and rate-limit backoff settings."""

    page_size: int = 100
    max_attempts: int = 5
    base_delay: float = 5.0
    multiplier: float = 2.0
    max_delay: float = 60.0

    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy(
            max_attempts=self.max_attempts,
            base_delay=self.base_delay,
            multiplier=self.multiplier,
            max_delay=self.max_delay,
        )


@dataclass(frozen=True)
class AdminConfig:
    """Where the admin API listens."""

    enabled: bool = True
    host: str = "127.0.0.1"
    port: int = 8765
