"""Unit tests for wake-up backends and the backend factory."""

import asyncio
from unittest.mock import Mock

import pytest

from deferkit.adapters.wakeup.asyncio_loop import AsyncioWakeupScheduler
from deferkit.adapters.wakeup.factory import create_wakeup_scheduler
from deferkit.adapters.wakeup.manual import ManualWakeupScheduler
from deferkit.core.config import TimingSettings
from deferkit.core.errors import ConfigurationError, SchedulerError
from deferkit.services.timing import Timing, create_timing


class TestManualWakeupScheduler:
    """Virtual time backend."""

    def test_fires_in_due_order(self) -> None:
        wakeup = ManualWakeupScheduler()
        order: list[str] = []

        wakeup.schedule(3, lambda: order.append("late"))
        wakeup.schedule(1, lambda: order.append("early"))
        wakeup.schedule(1, lambda: order.append("early-2"))

        assert wakeup.advance(5) == 3
        assert order == ["early", "early-2", "late"]
        assert wakeup.now() == 5

    def test_clock_reads_due_time_while_firing(self) -> None:
        wakeup = ManualWakeupScheduler(start=10)
        seen: list[float] = []

        wakeup.schedule(2, lambda: seen.append(wakeup.now()))
        wakeup.advance(5)

        assert seen == [12]
        assert wakeup.now() == 15

    def test_cancelled_wakeup_does_not_fire(self) -> None:
        wakeup = ManualWakeupScheduler()
        callback = Mock()

        handle = wakeup.schedule(1, callback)
        wakeup.cancel(handle)
        wakeup.advance(2)

        callback.assert_not_called()
        assert handle.cancelled is True
        assert wakeup.pending_count == 0

    def test_jump_moves_clock_without_firing(self) -> None:
        wakeup = ManualWakeupScheduler()
        callback = Mock()
        wakeup.schedule(1, callback)

        wakeup.jump(5)
        callback.assert_not_called()
        wakeup.jump(-10)
        assert wakeup.now() == -5

    def test_cancel_rejects_foreign_handle(self) -> None:
        wakeup = ManualWakeupScheduler()

        with pytest.raises(SchedulerError) as exc_info:
            wakeup.cancel(Mock())

        assert exc_info.value.code == "foreign_handle"


class TestAsyncioWakeupScheduler:
    """Event loop backend."""

    @pytest.mark.asyncio
    async def test_after_fires_on_event_loop(self) -> None:
        timing = Timing(AsyncioWakeupScheduler())
        fired = asyncio.Event()

        timing.after(0.01, fired.set)

        await asyncio.wait_for(fired.wait(), timeout=1)

    @pytest.mark.asyncio
    async def test_abort_cancels_timer_handle(self) -> None:
        wakeup = AsyncioWakeupScheduler()
        timing = Timing(wakeup)
        callback = Mock()

        deferred = timing.after(0.01, callback)
        deferred.abort()
        await asyncio.sleep(0.05)

        callback.assert_not_called()

    @pytest.mark.asyncio
    async def test_debounce_on_event_loop(self) -> None:
        timing = Timing(AsyncioWakeupScheduler())
        func = Mock()
        debounced = timing.debounce(func, 0.02)

        debounced(1)
        debounced(2)
        debounced(3)
        await asyncio.sleep(0.1)

        func.assert_called_once_with(3)

    @pytest.mark.asyncio
    async def test_now_uses_loop_time(self) -> None:
        wakeup = AsyncioWakeupScheduler()

        assert wakeup.now() == pytest.approx(asyncio.get_running_loop().time(), abs=0.05)

    @pytest.mark.asyncio
    async def test_cancel_rejects_foreign_handle(self) -> None:
        wakeup = AsyncioWakeupScheduler()
        foreign = ManualWakeupScheduler().schedule(1, Mock())

        with pytest.raises(SchedulerError):
            wakeup.cancel(foreign)

    def test_schedule_without_running_loop_raises(self) -> None:
        wakeup = AsyncioWakeupScheduler()

        with pytest.raises(SchedulerError) as exc_info:
            wakeup.schedule(1, Mock())

        assert exc_info.value.code == "no_running_loop"

    def test_schedule_on_closed_loop_raises(self) -> None:
        loop = asyncio.new_event_loop()
        loop.close()
        wakeup = AsyncioWakeupScheduler(loop)

        with pytest.raises(SchedulerError) as exc_info:
            wakeup.schedule(1, Mock())

        assert exc_info.value.code == "loop_closed"


class TestFactory:
    """Backend selection from settings."""

    def test_manual_backend(self) -> None:
        wakeup = create_wakeup_scheduler(TimingSettings(backend="manual", manual_start=7))

        assert isinstance(wakeup, ManualWakeupScheduler)
        assert wakeup.now() == 7

    def test_asyncio_backend_is_case_insensitive(self) -> None:
        wakeup = create_wakeup_scheduler(TimingSettings(backend=" AsyncIO "))

        assert isinstance(wakeup, AsyncioWakeupScheduler)

    def test_unknown_backend_raises(self) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            create_wakeup_scheduler(TimingSettings(backend="twisted"))

        assert exc_info.value.code == "unknown_wakeup_backend"
        assert "twisted" in str(exc_info.value)

    def test_create_timing_uses_configured_backend(self) -> None:
        timing = create_timing(TimingSettings(backend="manual"))

        assert isinstance(timing.wakeup, ManualWakeupScheduler)

    def test_create_timing_accepts_explicit_backend(self) -> None:
        wakeup = ManualWakeupScheduler(start=3)

        timing = create_timing(wakeup=wakeup)

        assert timing.wakeup is wakeup
        assert timing.now() == 3
