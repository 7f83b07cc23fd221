"""Adapters for host capabilities.

This package keeps the timing services independent of any particular event
loop so hosts can swap the wake-up backend without touching callers.
"""
