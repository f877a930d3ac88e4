"""Process-wide runtime toggles and counters.

ControlState is the only state shared between classification sessions and the
admin API. It is passed explicitly to every component that needs it.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Callable, Optional

LOGGER = logging.getLogger(__name__)


class Toggle(str, Enum):
    PROCESSING = "processing"
    CACHING = "caching"
    REPORTING = "reporting"


@dataclass(frozen=True)
class ControlSnapshot:
    """Consistent view of ControlState taken under its lock."""

    uptime: str
    commands_received: int
    processing_enabled: bool
    caching_enabled: bool
    reporting_enabled: bool
    processing_counter: int
    cache_available: bool


def format_uptime(delta: timedelta) -> str:
    seconds = max(int(delta.total_seconds()), 0)
    days, seconds = divmod(seconds, 86400)
    hours, seconds = divmod(seconds, 3600)
    minutes, seconds = divmod(seconds, 60)
    return f"{days}d {hours:02d}h {minutes:02d}m {seconds:02d}s"


class ControlState:
    """Toggles, counters and the exit flag, guarded by a single lock."""

    def __init__(
        self,
        processing_enabled: bool = True,
        caching_enabled: bool = True,
        reporting_enabled: bool = True,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self._lock = threading.Lock()
        self._clock = clock
        self._started_at = clock()
        self._toggles = {
            Toggle.PROCESSING: processing_enabled,
            Toggle.CACHING: caching_enabled,
            Toggle.REPORTING: reporting_enabled,
        }
        self._commands_received = 0
        self._in_flight = 0
        self._exit_requested = False
        self._exit_event: Optional[asyncio.Event] = None

    @property
    def started_at(self) -> datetime:
        return self._started_at

    @property
    def in_flight(self) -> int:
        # Lock-free read; a slightly stale value is fine for status output.
        return self._in_flight

    @property
    def exit_requested(self) -> bool:
        return self._exit_requested

    def uptime(self) -> timedelta:
        return self._clock() - self._started_at

    def is_enabled(self, toggle: Toggle) -> bool:
        with self._lock:
            return self._toggles[toggle]

    def set_toggle(self, toggle: Toggle, value: bool) -> None:
        with self._lock:
            previous = self._toggles[toggle]
            self._toggles[toggle] = bool(value)
        if previous != bool(value):
            LOGGER.info("Toggle %s set to %s", toggle.value, bool(value))

    def record_command(self) -> int:
        with self._lock:
            self._commands_received += 1
            return self._commands_received

    def session_started(self) -> int:
        with self._lock:
            self._in_flight += 1
            return self._in_flight

    def session_finished(self) -> int:
        with self._lock:
            if self._in_flight == 0:
                LOGGER.error("Session counter underflow ignored")
                return 0
            self._in_flight -= 1
            return self._in_flight

    def snapshot(self, cache_available: bool) -> ControlSnapshot:
        with self._lock:
            return ControlSnapshot(
                uptime=format_uptime(self.uptime()),
                commands_received=self._commands_received,
                processing_enabled=self._toggles[Toggle.PROCESSING],
                caching_enabled=self._toggles[Toggle.CACHING],
                reporting_enabled=self._toggles[Toggle.REPORTING],
                processing_counter=self._in_flight,
                cache_available=cache_available,
            )

    def request_exit(self) -> None:
        with self._lock:
            self._exit_requested = True
            event = self._exit_event
        LOGGER.info("Exit requested")
        if event is not None:
            event.set()

    async def wait_for_exit(self) -> None:
        with self._lock:
            if self._exit_event is None:
                self._exit_event = asyncio.Event()
                if self._exit_requested:
                    self._exit_event.set()
            event = self._exit_event
        await event.wait()
