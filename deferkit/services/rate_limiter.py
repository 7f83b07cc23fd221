"""Debounce/throttle engine.

Wraps a target function and decides, per call, whether to invoke it now,
merge the call into the current window or defer it to the trailing edge.

Decision per call:
- first call, quiet period elapsed, clock went backwards or ``max_wait``
  reached -> open a window (leading edge) or, inside a tight burst with
  ``max_wait``, invoke right away and re-arm the ceiling timer
- otherwise make sure a trailing-edge timer is armed

A throttle is the special case ``max_wait == wait``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable

from deferkit.services.deferred import DeferredCall

if TYPE_CHECKING:
    from deferkit.services.timing import Timing

logger = logging.getLogger(__name__)


@dataclass
class _EdgeState:
    last_call_time: float | None = None
    last_invoke_time: float | None = None
    pending: DeferredCall | None = None
    has_pending_args: bool = False
    last_args: tuple[Any, ...] = ()
    last_kwargs: dict[str, Any] = field(default_factory=dict)


class RateLimiter:
    """Debounced (or throttled) wrapper around ``func``.

    Calling the instance records the arguments and lets the edge logic
    decide when ``func`` runs; it always runs with the latest arguments.

    Attributes:
        wait: Quiet period in seconds (clamped to >= 0).
        max_wait: Ceiling on how long an invocation may be postponed
            (clamped to >= wait), or None.
        leading: Invoke when a window opens.
        trailing: Invoke when a window closes, if calls arrived meanwhile.
    """

    def __init__(
        self,
        timing: "Timing",
        func: Callable[..., Any],
        wait: float,
        *,
        leading: bool = False,
        trailing: bool = True,
        max_wait: float | None = None,
    ) -> None:
        self._timing = timing
        self._func = func
        self.wait = max(wait, 0.0)
        self.leading = leading
        self.trailing = trailing
        self.max_wait = max(max_wait, self.wait) if max_wait is not None else None
        self._state = _EdgeState()

    def __repr__(self) -> str:  # pragma: no cover - representation only
        return (
            f"RateLimiter(func={getattr(self._func, '__qualname__', self._func)!r}, "
            f"wait={self.wait}, max_wait={self.max_wait}, leading={self.leading}, "
            f"trailing={self.trailing}, pending={self.pending})"
        )

    def __call__(self, *args: Any, **kwargs: Any) -> None:
        self.call(*args, **kwargs)

    @property
    def pending(self) -> bool:
        """Whether a trailing-edge timer is currently armed."""
        return self._state.pending is not None

    def call(self, *args: Any, **kwargs: Any) -> None:
        """Trigger a rate-limited invocation of ``func``.

        Exceptions raised by ``func`` on an immediate invocation propagate
        to the caller.
        """
        state = self._state
        time = self._timing.now()
        is_invoking = self._should_invoke(time)

        state.last_args = args
        state.last_kwargs = kwargs
        state.has_pending_args = True
        state.last_call_time = time

        if is_invoking:
            if state.pending is None:
                self._leading_edge(time)
                return
            if self.max_wait is not None:
                # Tight burst: the trailing timer keeps getting pushed out,
                # so honour the ceiling now and restart it.
                state.pending.abort()
                self._arm(self.max_wait)
                self._invoke(time)
                return

        if state.pending is None:
            self._arm(self.wait)

    def abort(self) -> None:
        """Cancel the delayed invocation and forget all timing state."""
        state = self._state
        if state.pending is not None:
            state.pending.abort()
        self._state = _EdgeState()
        logger.debug("rate_limiter.aborted", extra={"wait_s": self.wait})

    def flush(self) -> None:
        """Run the trailing edge immediately if a window is open."""
        state = self._state
        if state.pending is None:
            return
        state.pending.abort()
        self._trailing_edge(self._timing.now())

    def _arm(self, seconds: float) -> None:
        # Assign before starting: a zero wait fires synchronously and the
        # trailing-edge handler must see (and clear) this deferral.
        deferred = self._timing.build(seconds, self._timer_expired)
        self._state.pending = deferred
        deferred.start()

    def _leading_edge(self, time: float) -> None:
        state = self._state
        args, kwargs = state.last_args, state.last_kwargs
        state.last_invoke_time = time
        self._arm(self.wait)
        if not self.leading:
            return
        if self.trailing and not self._state.has_pending_args:
            # A zero wait already ran the trailing edge with these arguments.
            return
        self._call_func(time, args, kwargs)

    def _remaining_wait(self, time: float) -> float:
        state = self._state
        since_last_call = time - (state.last_call_time or 0.0)
        remaining = self.wait - since_last_call
        if self.max_wait is None:
            return remaining
        since_last_invoke = time - (state.last_invoke_time or 0.0)
        return min(remaining, self.max_wait - since_last_invoke)

    def _should_invoke(self, time: float) -> bool:
        state = self._state
        if state.last_call_time is None:
            return True
        since_last_call = time - state.last_call_time
        # Quiet period elapsed, or the clock went backwards (treated as the
        # trailing edge), or the max_wait ceiling was reached.
        if since_last_call >= self.wait or since_last_call < 0:
            return True
        if self.max_wait is not None and state.last_invoke_time is not None:
            return time - state.last_invoke_time >= self.max_wait
        return False

    def _timer_expired(self) -> None:
        time = self._timing.now()
        if self._should_invoke(time):
            self._trailing_edge(time)
            return
        remaining = self._remaining_wait(time)
        logger.debug("rate_limiter.rearmed", extra={"remaining_s": remaining})
        self._arm(remaining)

    def _trailing_edge(self, time: float) -> None:
        state = self._state
        state.pending = None
        if self.trailing and state.has_pending_args:
            logger.debug("rate_limiter.trailing_edge", extra={"wait_s": self.wait})
            self._invoke(time)
            return
        self._reset_args()

    def _reset_args(self) -> None:
        state = self._state
        state.has_pending_args = False
        state.last_args = ()
        state.last_kwargs = {}

    def _invoke(self, time: float) -> None:
        state = self._state
        self._call_func(time, state.last_args, state.last_kwargs)

    def _call_func(self, time: float, args: tuple[Any, ...], kwargs: dict[str, Any]) -> None:
        self._state.last_invoke_time = time
        self._reset_args()
        self._func(*args, **kwargs)
