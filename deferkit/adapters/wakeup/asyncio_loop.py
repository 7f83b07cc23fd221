"""Wake-up scheduler backed by an asyncio event loop.

Notes:
- Callbacks run on the loop thread via ``loop.call_later``.
- ``now()`` is ``loop.time()``, a monotonic clock.
- Not thread-safe: schedule/cancel from the loop thread only.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable

from deferkit.adapters.wakeup.base import AbstractWakeupScheduler, WakeupHandle
from deferkit.core.errors import SchedulerError

logger = logging.getLogger(__name__)


class _AsyncioHandle(WakeupHandle):
    def __init__(self, timer: asyncio.TimerHandle) -> None:
        self.timer = timer

    @property
    def cancelled(self) -> bool:
        return self.timer.cancelled()


class AsyncioWakeupScheduler(AbstractWakeupScheduler):
    """Schedule wake-ups on an asyncio event loop.

    The loop is resolved lazily so the scheduler can be built before the
    loop starts (for example at import time of a host module).
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        """Initialize the asyncio wake-up scheduler.

        Args:
            loop: Event loop to use; defaults to the running loop at first use.
        """
        self._loop = loop

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            try:
                self._loop = asyncio.get_running_loop()
            except RuntimeError as exc:
                raise SchedulerError(
                    code="no_running_loop",
                    message="AsyncioWakeupScheduler needs a running event loop or an explicit loop",
                    details={"backend": "asyncio"},
                ) from exc
        if self._loop.is_closed():
            raise SchedulerError(
                code="loop_closed",
                message="Cannot schedule a wake-up on a closed event loop",
                details={"backend": "asyncio"},
            )
        return self._loop

    def schedule(self, delay: float, on_fire: Callable[[], None]) -> WakeupHandle:
        loop = self._get_loop()
        timer = loop.call_later(delay, on_fire)
        logger.debug("wakeup.scheduled", extra={"backend": "asyncio", "delay_s": delay})
        return _AsyncioHandle(timer)

    def cancel(self, handle: WakeupHandle) -> None:
        if not isinstance(handle, _AsyncioHandle):
            raise SchedulerError(
                code="foreign_handle",
                message="handle was not issued by AsyncioWakeupScheduler",
                details={"backend": "asyncio", "handle_type": type(handle).__name__},
            )
        handle.timer.cancel()

    def now(self) -> float:
        return self._get_loop().time()
