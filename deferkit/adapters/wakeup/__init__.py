"""Wake-up adapter layer - abstracts over host timer runtimes."""

from deferkit.adapters.wakeup.asyncio_loop import AsyncioWakeupScheduler
from deferkit.adapters.wakeup.base import AbstractWakeupScheduler, WakeupHandle
from deferkit.adapters.wakeup.factory import create_wakeup_scheduler
from deferkit.adapters.wakeup.manual import ManualWakeupScheduler

__all__ = [
    "AbstractWakeupScheduler",
    "AsyncioWakeupScheduler",
    "ManualWakeupScheduler",
    "WakeupHandle",
    "create_wakeup_scheduler",
]
