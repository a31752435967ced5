"""
Shared pytest fixtures and configuration for JoinX tests.
"""

import pytest

from joinx import ListSource, SourceBinding, _reset_notification_state


@pytest.fixture(autouse=True)
def reset_notification_state():
    """Reset the propagation queue before each test to prevent state leakage."""
    _reset_notification_state()


@pytest.fixture
def scenario():
    """
    Two bindings from the reference scenario.

    B1 holds items typed X2, X1 and declares [X1, X2].
    B2 holds one item typed Y1 and declares [Y1].
    """
    b1 = SourceBinding(
        ListSource(["X2", "X1"], type_of=lambda tag: tag, key="b1"), ("X1", "X2")
    )
    b2 = SourceBinding(ListSource(["Y1"], type_of=lambda tag: tag, key="b2"), ("Y1",))
    return b1, b2


@pytest.fixture
def recorder():
    """A change observer that records every event it receives."""

    class Recorder:
        def __init__(self):
            self.events = []

        def __call__(self, event):
            self.events.append(event)

        @property
        def kinds(self):
            return [event.kind for event in self.events]

    return Recorder()
