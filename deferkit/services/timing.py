"""Time-driven callbacks built on an injected wake-up backend.

Usage:
    timing = Timing(ManualWakeupScheduler())
    timing.after(5, lambda: print("in 5 seconds"))
    ticker = timing.every(5, lambda: print("every 5 seconds"))
    ticker.abort()

    save = timing.debounce(store.save, wait=0.3)
    save(document)  # store.save(document) 0.3s after the last call

Every call returns an object with ``abort()`` to stop the callback.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from deferkit.adapters.wakeup.base import AbstractWakeupScheduler
from deferkit.adapters.wakeup.factory import create_wakeup_scheduler
from deferkit.core.config import TimingSettings, settings
from deferkit.services.deferred import Callback, DeferredCall
from deferkit.services.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

Clock = Callable[[], float]

# Shortest repeat interval; a zero interval would re-fire synchronously forever.
MIN_EVERY_INTERVAL = 0.001


class Timing:
    """Factory for deferred, repeating and rate-limited calls.

    Args:
        wakeup: Backend used to schedule wake-ups.
        clock: Time source; defaults to the backend's own ``now()``.
        timing_settings: Defaults for ``debounce``/``throttle`` edges.
    """

    def __init__(
        self,
        wakeup: AbstractWakeupScheduler,
        *,
        clock: Clock | None = None,
        timing_settings: TimingSettings | None = None,
    ) -> None:
        self.wakeup = wakeup
        self._clock = clock or wakeup.now
        self._settings = timing_settings or settings.timing

    def now(self) -> float:
        """Current time as seen by this scheduler's rate limiters."""
        return self._clock()

    def build(self, seconds: float, callback: Callback | None) -> DeferredCall:
        """Create an unarmed deferral; call ``start()`` to arm it."""
        return DeferredCall(self.wakeup, seconds, callback)

    def after(self, seconds: float, callback: Callback | None) -> DeferredCall:
        """Call the callback once after the given seconds.

        Args:
            seconds: Time to wait; <= 0 invokes the callback right away.
            callback: Callable to run.

        Returns:
            The started DeferredCall, for a later ``abort()``.
        """
        deferred = self.build(seconds, callback)
        deferred.start()
        return deferred

    def every(self, seconds: float, callback: Callback) -> DeferredCall:
        """Call the callback every ``seconds``; the first time in ``seconds``.

        The interval is measured from each fire, without drift compensation.
        Aborting the returned deferral stops future repetitions. Intervals
        below ``MIN_EVERY_INTERVAL`` (including <= 0) are clamped to it, so a
        repeat always goes through the wake-up backend.
        """
        if seconds < MIN_EVERY_INTERVAL:
            logger.debug(
                "timing.every_interval_clamped",
                extra={"interval_s": seconds, "clamped_s": MIN_EVERY_INTERVAL},
            )
            seconds = MIN_EVERY_INTERVAL
        deferred: DeferredCall | None = None

        def _repeat() -> None:
            callback()
            if deferred is not None and not deferred.aborted:
                deferred.start()

        deferred = self.build(seconds, _repeat)
        deferred.start()
        logger.debug("timing.every_started", extra={"interval_s": seconds})
        return deferred

    def debounce(
        self,
        func: Callable[..., Any],
        wait: float,
        max_wait: float | None = None,
        leading: bool | None = None,
        trailing: bool | None = None,
    ) -> RateLimiter:
        """Delay ``func`` until ``wait`` seconds passed since the last call.

        If both edges are enabled, ``func`` runs on the trailing edge only
        when the debounced function was called more than once in the window.

        Args:
            func: Function to debounce.
            wait: Seconds to delay.
            max_wait: Maximum seconds ``func`` may be delayed.
            leading: Invoke on the leading edge (settings default: False).
            trailing: Invoke on the trailing edge (settings default: True).

        Returns:
            RateLimiter wrapping ``func``.
        """
        return RateLimiter(
            self,
            func,
            wait,
            leading=self._settings.debounce_leading if leading is None else leading,
            trailing=self._settings.debounce_trailing if trailing is None else trailing,
            max_wait=max_wait,
        )

    def throttle(
        self,
        func: Callable[..., Any],
        wait: float,
        leading: bool | None = None,
        trailing: bool | None = None,
    ) -> RateLimiter:
        """Invoke ``func`` at most once per ``wait`` seconds.

        A throttle is a debounce whose ``max_wait`` equals ``wait``.
        """
        return RateLimiter(
            self,
            func,
            wait,
            leading=self._settings.throttle_leading if leading is None else leading,
            trailing=self._settings.throttle_trailing if trailing is None else trailing,
            max_wait=wait,
        )


def create_timing(
    timing_settings: TimingSettings | None = None,
    wakeup: AbstractWakeupScheduler | None = None,
) -> Timing:
    """Build a Timing wired to the configured wake-up backend.

    Args:
        timing_settings: Optional timing settings; defaults to global settings.
        wakeup: Explicit backend, bypassing the configured one.

    Raises:
        ConfigurationError: If the configured backend is unknown.
    """
    cfg = timing_settings or settings.timing
    backend = wakeup or create_wakeup_scheduler(cfg)
    logger.info("timing.created", extra={"backend": type(backend).__name__})
    return Timing(backend, timing_settings=cfg)
