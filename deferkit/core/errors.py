"""Library-level exception types.

This module defines the errors raised across services/adapters, enabling
consistent error handling and logging for hosts embedding deferkit.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, NotRequired, TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability.

    Fields are optional so each error only carries what it knows.
    """

    code: str
    message: str
    hint: str
    backend: str
    handle_type: str
    resource: str
    context: NotRequired[dict[str, Any]]


@dataclass
class DeferkitError(Exception):
    """Base error for scheduling/caching failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message.
        details: Optional structured details for debugging/observability.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class ConfigurationError(DeferkitError):
    """Raised when settings cannot be turned into working components."""


class SchedulerError(DeferkitError):
    """Raised when a wake-up backend is misused."""


@dataclass
class ResourceReleasedError(DeferkitError):
    """Raised by a callback whose host resource is already gone.

    This is the only callback failure a DeferredCall swallows: timers are
    often bound to UI widgets or connections that get torn down before the
    timer fires. Hosts raise it (or a subclass) from their callbacks.
    """

    code: str = "resource_released"
    message: str = "callback target has already been released"
    details: ErrorDetails | None = None
