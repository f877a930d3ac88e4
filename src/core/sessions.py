"""Session lifecycle: per-channel activity indicator and in-flight counter."""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from core.control import ControlState
from core.ports import ActivityIndicatorPort

LOGGER = logging.getLogger(__name__)


class ActivityRegistry:
    """One supervised indicator task per channel, shared by its holders."""

    def __init__(self, indicator: ActivityIndicatorPort) -> None:
        self._indicator = indicator
        self._tasks: dict[int, asyncio.Task] = {}
        self._holders: dict[int, int] = {}

    def is_running(self, channel_id: int) -> bool:
        task = self._tasks.get(channel_id)
        return task is not None and not task.done()

    def holders(self, channel_id: int) -> int:
        return self._holders.get(channel_id, 0)

    def acquire(self, channel_id: int) -> bool:
        """Register a holder; start the indicator only if none is running."""

        self._holders[channel_id] = self._holders.get(channel_id, 0) + 1
        if self.is_running(channel_id):
            return False
        task = asyncio.create_task(self._indicator.run(channel_id), name=f"activity:{channel_id}")
        task.add_done_callback(self._on_done)
        self._tasks[channel_id] = task
        return True

    async def release(self, channel_id: int) -> None:
        """Drop a holder; the last one out stops the indicator."""

        remaining = self._holders.get(channel_id, 0) - 1
        if remaining > 0:
            self._holders[channel_id] = remaining
            return
        self._holders.pop(channel_id, None)
        task = self._tasks.pop(channel_id, None)
        if task is None or task.done():
            return
        task.cancel()
        # Outcome is reported by _on_done.
        await asyncio.wait({task})

    @staticmethod
    def _on_done(task: asyncio.Task) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            LOGGER.warning("Activity indicator %s stopped: %s", task.get_name(), exc)


class SessionManager:
    """Tracks Active sessions across channels."""

    def __init__(self, control: ControlState, activities: ActivityRegistry) -> None:
        self._control = control
        self._activities = activities
        self._idle = asyncio.Event()
        self._idle.set()

    @property
    def in_flight(self) -> int:
        return self._control.in_flight

    @asynccontextmanager
    async def session(self, channel_id: int) -> AsyncIterator[None]:
        self._control.session_started()
        self._idle.clear()
        try:
            self._activities.acquire(channel_id)
            yield
        finally:
            try:
                await self._activities.release(channel_id)
            finally:
                if self._control.session_finished() == 0:
                    self._idle.set()

    async def wait_idle(self, timeout: Optional[float] = None) -> bool:
        """Wait until no session is Active; False when the timeout expired."""

        try:
            await asyncio.wait_for(self._idle.wait(), timeout)
        except asyncio.TimeoutError:
            return False
        return True
