"""One-shot, abortable deferred invocation of a callback.

A DeferredCall asks its wake-up backend to call back after ``duration``
seconds and then runs the user callback exactly once per ``start()``.

States:
- Armed: started, not yet fired
- Finished: fired (or fired synchronously because duration <= 0)
- Aborted: cancelled before firing; the callback never runs

Some hosts cannot truly revoke an issued wake-up, so the fire handler
re-checks ``finished`` and the handle identity before invoking.
"""

from __future__ import annotations

import logging
from typing import Callable

from deferkit.adapters.wakeup.base import AbstractWakeupScheduler, WakeupHandle
from deferkit.core.errors import ResourceReleasedError

logger = logging.getLogger(__name__)

Callback = Callable[[], None]


class DeferredCall:
    """Deferred invocation bound to one wake-up backend.

    Attributes:
        duration: Seconds to defer; values <= 0 fire synchronously on start.
        callback: Zero-argument callable to run, or None.
    """

    def __init__(
        self,
        wakeup: AbstractWakeupScheduler,
        duration: float,
        callback: Callback | None,
    ) -> None:
        self._wakeup = wakeup
        self.duration = duration
        self.callback = callback
        self._finished = False
        self._aborted = False
        self._firing = False
        self._handle: WakeupHandle | None = None

    def __repr__(self) -> str:  # pragma: no cover - representation only
        return (
            f"DeferredCall(duration={self.duration}, finished={self._finished}, "
            f"aborted={self._aborted})"
        )

    @property
    def finished(self) -> bool:
        """True if the invocation happened (or was aborted) since the last start."""
        return self._finished

    @property
    def aborted(self) -> bool:
        """True if the invocation will not happen since the last start."""
        return self._aborted

    def start(self) -> None:
        """Arm (or re-arm) the deferral.

        Any wake-up still outstanding from a previous start is cancelled so
        only one handle is live per instance.

        Raises:
            Exception: Whatever the callback raises on a synchronous fire,
                except ResourceReleasedError which is logged.
        """
        self._release_handle()
        self._finished = False
        self._aborted = False

        if self.duration > 0:
            handle: WakeupHandle | None = None

            def _on_wakeup() -> None:
                self._on_wakeup(handle)

            handle = self._wakeup.schedule(self.duration, _on_wakeup)
            self._handle = handle
            return

        self._finished = True
        self._invoke_safely()

    def abort(self) -> None:
        """Cancel the pending invocation.

        Aborting from inside the running callback is honoured too, which is
        how a repeating timer stops itself.
        """
        if self._finished and not self._firing:
            return
        self._release_handle()
        self._finished = True
        self._aborted = True
        logger.debug("deferred.aborted", extra={"duration_s": self.duration})

    def _release_handle(self) -> None:
        if self._handle is not None:
            self._wakeup.cancel(self._handle)
            self._handle = None

    def _on_wakeup(self, handle: WakeupHandle | None) -> None:
        if handle is not self._handle:
            logger.debug("deferred.stale_wakeup", extra={"duration_s": self.duration})
            return
        if self._finished:
            return
        self._handle = None
        self._finished = True
        self._invoke_safely()

    def _invoke_safely(self) -> None:
        if self.callback is None:
            return
        self._firing = True
        try:
            self.callback()
        except ResourceReleasedError as exc:
            # Timers often outlive the widgets/connections they reference.
            # Anything else is intentionally left to propagate.
            logger.warning(
                "deferred.callback_released",
                extra={"error_code": exc.code, "reason": exc.message, "duration_s": self.duration},
            )
        finally:
            self._firing = False
