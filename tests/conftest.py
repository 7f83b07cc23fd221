"""Pytest configuration and fixtures shared across all test modules.

This file is automatically loaded by pytest before running any tests.
It pins the environment so settings never pick up a developer's .env file.
"""

import os

# CRITICAL: Set this before any imports that might load settings
os.environ["DEFERKIT_ENV"] = "testing"
os.environ.setdefault("TIMING_BACKEND", "manual")
os.environ.setdefault("LOG_LEVEL", "DEBUG")

import pytest  # noqa: E402

from deferkit.adapters.wakeup.manual import ManualWakeupScheduler  # noqa: E402
from deferkit.services.timing import Timing  # noqa: E402


@pytest.fixture
def wakeup() -> ManualWakeupScheduler:
    """Virtual-time backend starting at t=0."""
    return ManualWakeupScheduler()


@pytest.fixture
def timing(wakeup: ManualWakeupScheduler) -> Timing:
    """Timing bound to the virtual-time backend and its clock."""
    return Timing(wakeup)
