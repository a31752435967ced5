"""
Test utilities for JoinX.

Shared helpers for checking how long composites, bindings and their
subscriptions live.
"""

from .lifetime import (
    InstanceTracker,
    SubscriptionLedger,
    assert_no_leak,
    assert_released,
    live_instances,
)

__all__ = [
    "assert_released",
    "assert_no_leak",
    "live_instances",
    "InstanceTracker",
    "SubscriptionLedger",
]
