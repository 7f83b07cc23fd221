"""Factory for creating wake-up scheduler instances."""

from __future__ import annotations

from deferkit.adapters.wakeup.asyncio_loop import AsyncioWakeupScheduler
from deferkit.adapters.wakeup.base import AbstractWakeupScheduler
from deferkit.adapters.wakeup.manual import ManualWakeupScheduler
from deferkit.core.config import TimingSettings, settings
from deferkit.core.errors import ConfigurationError


def create_wakeup_scheduler(timing_settings: TimingSettings | None = None) -> AbstractWakeupScheduler:
    """Instantiate the wake-up backend named in configuration.

    Args:
        timing_settings: Optional timing settings; defaults to global settings.

    Returns:
        AbstractWakeupScheduler: Configured backend instance.

    Raises:
        ConfigurationError: If the backend name is unknown.
    """
    cfg = timing_settings or settings.timing
    backend = cfg.backend.strip().lower()

    if backend == "asyncio":
        return AsyncioWakeupScheduler()

    if backend == "manual":
        return ManualWakeupScheduler(start=cfg.manual_start)

    raise ConfigurationError(
        code="unknown_wakeup_backend",
        message=f"Unknown wake-up backend: '{cfg.backend}'. Supported backends: asyncio, manual",
        details={"backend": cfg.backend},
    )
