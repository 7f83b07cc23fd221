"""Virtual-time wake-up scheduler.

Time only moves when the owner calls :meth:`ManualWakeupScheduler.advance`
(or :meth:`ManualWakeupScheduler.jump`). Useful for deterministic tests and
for hosts that drive timers from their own frame/update loop.
"""

from __future__ import annotations

import heapq
import itertools
import logging
from dataclasses import dataclass, field
from typing import Callable

from deferkit.adapters.wakeup.base import AbstractWakeupScheduler, WakeupHandle
from deferkit.core.errors import SchedulerError

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class _ManualHandle(WakeupHandle):
    due: float
    on_fire: Callable[[], None]
    is_cancelled: bool = field(default=False)

    @property
    def cancelled(self) -> bool:
        return self.is_cancelled


class ManualWakeupScheduler(AbstractWakeupScheduler):
    """Wake-up scheduler whose clock is advanced explicitly.

    Attributes:
        fired: Number of wake-ups fired so far.
    """

    def __init__(self, start: float = 0.0) -> None:
        self._now = start
        self._seq = itertools.count()
        self._queue: list[tuple[float, int, _ManualHandle]] = []
        self.fired = 0

    def __repr__(self) -> str:  # pragma: no cover - representation only
        return f"ManualWakeupScheduler(now={self._now}, pending={self.pending_count})"

    @property
    def pending_count(self) -> int:
        """Number of scheduled wake-ups that are neither fired nor cancelled."""
        return sum(1 for _, _, handle in self._queue if not handle.is_cancelled)

    def schedule(self, delay: float, on_fire: Callable[[], None]) -> WakeupHandle:
        handle = _ManualHandle(due=self._now + max(delay, 0.0), on_fire=on_fire)
        heapq.heappush(self._queue, (handle.due, next(self._seq), handle))
        return handle

    def cancel(self, handle: WakeupHandle) -> None:
        if not isinstance(handle, _ManualHandle):
            raise SchedulerError(
                code="foreign_handle",
                message="handle was not issued by ManualWakeupScheduler",
                details={"backend": "manual", "handle_type": type(handle).__name__},
            )
        handle.is_cancelled = True

    def now(self) -> float:
        return self._now

    def jump(self, seconds: float) -> None:
        """Move the clock without firing anything.

        Negative values simulate a clock that went backwards.
        """
        self._now += seconds

    def advance(self, seconds: float) -> int:
        """Move time forward, firing due wake-ups in due order.

        Wake-ups scheduled by callbacks during the advance fire too when they
        fall inside the window.

        Args:
            seconds: Amount of virtual time to advance (negative treated as 0).

        Returns:
            Number of wake-ups fired during this advance.
        """
        target = self._now + max(seconds, 0.0)
        count = 0
        while self._queue and self._queue[0][0] <= target:
            due, _, handle = heapq.heappop(self._queue)
            if handle.is_cancelled:
                continue
            self._now = max(self._now, due)
            count += 1
            self.fired += 1
            handle.on_fire()
        self._now = max(self._now, target)
        if count:
            logger.debug("wakeup.advanced", extra={"backend": "manual", "fired": count, "now": self._now})
        return count
