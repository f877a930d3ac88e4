from __future__ import annotations

import asyncio

import pytest

from core.control import ControlState
from core.sessions import ActivityRegistry, SessionManager


class FakeIndicator:
    def __init__(self) -> None:
        self.started: list[int] = []
        self.stopped: list[int] = []

    async def run(self, channel_id: int) -> None:
        self.started.append(channel_id)
        try:
            await asyncio.Event().wait()
        finally:
            self.stopped.append(channel_id)


class CrashingIndicator:
    async def run(self, channel_id: int) -> None:
        raise RuntimeError("typing failed")


def test_session_tracks_counter_and_indicator() -> None:
    control = ControlState()
    indicator = FakeIndicator()
    activities = ActivityRegistry(indicator)
    manager = SessionManager(control, activities)

    async def scenario() -> None:
        async with manager.session(10):
            await asyncio.sleep(0)
            assert control.in_flight == 1
            assert activities.is_running(10)
        assert control.in_flight == 0
        assert not activities.is_running(10)

    asyncio.run(scenario())
    assert indicator.started == [10]
    assert indicator.stopped == [10]


def test_session_is_released_on_error() -> None:
    control = ControlState()
    activities = ActivityRegistry(FakeIndicator())
    manager = SessionManager(control, activities)

    async def scenario() -> None:
        with pytest.raises(ValueError):
            async with manager.session(10):
                raise ValueError("pipeline failed")
        assert control.in_flight == 0
        assert not activities.is_running(10)

    asyncio.run(scenario())


def test_concurrent_sessions_share_one_indicator_per_channel() -> None:
    control = ControlState()
    indicator = FakeIndicator()
    activities = ActivityRegistry(indicator)
    manager = SessionManager(control, activities)

    async def scenario() -> None:
        first_inside = asyncio.Event()
        release_first = asyncio.Event()

        async def first() -> None:
            async with manager.session(10):
                first_inside.set()
                await release_first.wait()

        task = asyncio.create_task(first())
        await first_inside.wait()
        async with manager.session(10):
            await asyncio.sleep(0)
            assert control.in_flight == 2
            assert activities.holders(10) == 2
        # The first session still holds the channel.
        assert activities.is_running(10)
        assert control.in_flight == 1
        release_first.set()
        await task
        assert control.in_flight == 0
        assert not activities.is_running(10)

    asyncio.run(scenario())
    assert indicator.started == [10]


def test_sessions_in_different_channels_get_their_own_indicator() -> None:
    control = ControlState()
    indicator = FakeIndicator()
    manager = SessionManager(control, ActivityRegistry(indicator))

    async def scenario() -> None:
        async with manager.session(1):
            async with manager.session(2):
                await asyncio.sleep(0)
                assert control.in_flight == 2

    asyncio.run(scenario())
    assert sorted(indicator.started) == [1, 2]


def test_crashing_indicator_does_not_break_session() -> None:
    control = ControlState()
    manager = SessionManager(control, ActivityRegistry(CrashingIndicator()))

    async def scenario() -> None:
        async with manager.session(5):
            await asyncio.sleep(0)
        assert control.in_flight == 0

    asyncio.run(scenario())


def test_wait_idle_times_out_while_sessions_run() -> None:
    control = ControlState()
    manager = SessionManager(control, ActivityRegistry(FakeIndicator()))

    async def scenario() -> None:
        assert await manager.wait_idle(0.01)
        release = asyncio.Event()

        async def hold() -> None:
            async with manager.session(3):
                await release.wait()

        task = asyncio.create_task(hold())
        await asyncio.sleep(0)
        assert not await manager.wait_idle(0.01)
        release.set()
        assert await manager.wait_idle(1)
        await task

    asyncio.run(scenario())


class SlowStoppingIndicator:
    def __init__(self) -> None:
        self.stopping = asyncio.Event()
        self.finish = asyncio.Event()

    async def run(self, channel_id: int) -> None:
        try:
            await asyncio.Event().wait()
        except asyncio.CancelledError:
            self.stopping.set()
            await self.finish.wait()
            raise


def test_cancelling_the_caller_during_release_is_not_swallowed() -> None:
    async def scenario() -> bool:
        indicator = SlowStoppingIndicator()
        registry = ActivityRegistry(indicator)
        registry.acquire(1)
        await asyncio.sleep(0)

        releaser = asyncio.create_task(registry.release(1))
        await indicator.stopping.wait()
        releaser.cancel()
        await asyncio.sleep(0)
        indicator.finish.set()

        with pytest.raises(asyncio.CancelledError):
            await releaser
        return releaser.cancelled()

    assert asyncio.run(scenario()) is True
