"""Retry helper with exponential backoff for rate-limited calls."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, TypeVar

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from core.errors import RateLimitedError

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


def is_rate_limited(exc: BaseException) -> bool:
    return isinstance(exc, RateLimitedError)


@dataclass
class RetryPolicy:
    """Bounded exponential backoff around a single coroutine call.

    The sleep is an ordinary ``await``: a waiting caller holds no locks, so other
    sessions and the admin API keep running while it backs off.
    """

    max_attempts: int = 5
    base_delay: float = 5.0
    multiplier: float = 2.0
    max_delay: float = 60.0
    retry_on: Callable[[BaseException], bool] = is_rate_limited
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self._backoff = wait_exponential(
            multiplier=self.base_delay,
            exp_base=self.multiplier,
            max=self.max_delay,
        )

    def _wait(self, retry_state: RetryCallState) -> float:
        delay = self._backoff(retry_state)
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        hint = getattr(exc, "retry_after", None)
        if hint is not None and hint > delay:
            delay = float(hint)
        return delay

    def _log_retry(self, retry_state: RetryCallState) -> None:
        LOGGER.warning(
            "Rate limited (attempt %s/%s), retrying in %.1fs",
            retry_state.attempt_number,
            self.max_attempts,
            retry_state.next_action.sleep if retry_state.next_action else 0.0,
        )

    async def run(self, func: Callable[..., Awaitable[T]], *args, **kwargs) -> T:
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=self._wait,
            retry=retry_if_exception(self.retry_on),
            before_sleep=self._log_retry,
            sleep=self.sleep,
            reraise=True,
        )
        return await retrying(func, *args, **kwargs)
