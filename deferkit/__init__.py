"""Time-driven callbacks, debounce/throttle and coalescing load cache."""

from deferkit.adapters.wakeup import (
    AbstractWakeupScheduler,
    AsyncioWakeupScheduler,
    ManualWakeupScheduler,
    WakeupHandle,
    create_wakeup_scheduler,
)
from deferkit.core.errors import (
    ConfigurationError,
    DeferkitError,
    ResourceReleasedError,
    SchedulerError,
)
from deferkit.services import DeferredCall, LoadCache, RateLimiter, Timing, create_timing

__version__ = "0.1.0"

__all__ = [
    "AbstractWakeupScheduler",
    "AsyncioWakeupScheduler",
    "ConfigurationError",
    "DeferkitError",
    "DeferredCall",
    "LoadCache",
    "ManualWakeupScheduler",
    "RateLimiter",
    "ResourceReleasedError",
    "SchedulerError",
    "Timing",
    "WakeupHandle",
    "create_timing",
    "create_wakeup_scheduler",
]
