"""Wake-up scheduler interfaces.

Timers depend on this abstraction (not a concrete event loop) so hosts can
plug in asyncio, a frame-driven game loop or a virtual clock in tests.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable


class WakeupHandle(ABC):
    """Opaque token for one scheduled wake-up."""

    @property
    @abstractmethod
    def cancelled(self) -> bool:
        """Whether the backend was asked to revoke this wake-up."""
        raise NotImplementedError


class AbstractWakeupScheduler(ABC):
    """Interface for "call me back after N seconds" capabilities."""

    @abstractmethod
    def schedule(self, delay: float, on_fire: Callable[[], None]) -> WakeupHandle:
        """Request a single call to ``on_fire`` after ``delay`` seconds.

        Args:
            delay: Seconds to wait; always > 0 when called by DeferredCall.
            on_fire: Zero-argument callable to run when the wake-up is due.

        Returns:
            WakeupHandle that can be passed to :meth:`cancel`.

        Raises:
            SchedulerError: If the backend can no longer schedule.
        """
        raise NotImplementedError

    @abstractmethod
    def cancel(self, handle: WakeupHandle) -> None:
        """Best-effort revoke of a previously scheduled wake-up.

        Args:
            handle: Handle returned by this scheduler's :meth:`schedule`.

        Raises:
            SchedulerError: If the handle was issued by another backend.
        """
        raise NotImplementedError

    @abstractmethod
    def now(self) -> float:
        """Current time on this scheduler's timeline, in seconds."""
        raise NotImplementedError
