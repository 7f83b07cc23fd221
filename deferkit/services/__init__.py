"""Timing and caching services."""

from deferkit.services.deferred import DeferredCall
from deferkit.services.load_cache import LoadCache
from deferkit.services.rate_limiter import RateLimiter
from deferkit.services.timing import Timing, create_timing

__all__ = [
    "DeferredCall",
    "LoadCache",
    "RateLimiter",
    "Timing",
    "create_timing",
]
