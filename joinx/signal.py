"""
JoinX ChangeSignal - Change Notification for Source Lists
=========================================================

This module provides the notification plumbing shared by every source list
and by the composite itself.

A source reports changes at whatever granularity it knows about (a single
item changed, a range inserted, a block moved, or simply "everything
changed"). The composite treats all of them the same way: rebuild, then tell
the host that everything changed.

Key Features:
- Ordered observer lists guarded by a re-entrant lock
- Breadth-first delivery through a thread-local propagation queue, so an
  observer that causes another change never re-enters delivery
- Batching: many emissions inside ``with signal.batch():`` become one
"""

import threading
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional

# ============================================================================
# CHANGE EVENTS
# ============================================================================


class ChangeKind(Enum):
    """Granularity of a change reported by a source list."""

    CHANGED = "changed"
    ITEM_RANGE_CHANGED = "item_range_changed"
    ITEM_RANGE_INSERTED = "item_range_inserted"
    ITEM_RANGE_REMOVED = "item_range_removed"
    ITEM_RANGE_MOVED = "item_range_moved"


@dataclass(frozen=True)
class ChangeEvent:
    """A single change notification.

    ``start`` and ``count`` describe the affected local range; ``to_position``
    is only meaningful for moves.
    """

    kind: ChangeKind
    start: int = 0
    count: int = 0
    to_position: Optional[int] = None

    @property
    def is_structural(self) -> bool:
        """True when positions may have shifted (anything but a range change)."""
        return self.kind is not ChangeKind.ITEM_RANGE_CHANGED

    @classmethod
    def changed(cls) -> "ChangeEvent":
        return cls(ChangeKind.CHANGED)

    @classmethod
    def range_changed(cls, start: int, count: int) -> "ChangeEvent":
        return cls(ChangeKind.ITEM_RANGE_CHANGED, start, count)

    @classmethod
    def inserted(cls, start: int, count: int) -> "ChangeEvent":
        return cls(ChangeKind.ITEM_RANGE_INSERTED, start, count)

    @classmethod
    def removed(cls, start: int, count: int) -> "ChangeEvent":
        return cls(ChangeKind.ITEM_RANGE_REMOVED, start, count)

    @classmethod
    def moved(cls, from_position: int, to_position: int, count: int = 1) -> "ChangeEvent":
        return cls(ChangeKind.ITEM_RANGE_MOVED, from_position, count, to_position)


# ============================================================================
# PROPAGATION
# ============================================================================


class PropagationContext:
    """Manages breadth-first change propagation to prevent re-entrant delivery."""

    _local = threading.local()

    @classmethod
    def _get_state(cls) -> dict:
        if not hasattr(cls._local, "state"):
            cls._local.state = {"is_propagating": False, "pending": deque()}
        return cls._local.state

    @classmethod
    def _enqueue_notification(
        cls, observer: Callable, signal: "ChangeSignal", event: ChangeEvent
    ) -> None:
        cls._get_state()["pending"].append((observer, signal, event))

    @classmethod
    def _process_notifications(cls) -> None:
        """
        Deliver every pending notification in FIFO order.

        Notifications enqueued by an observer while this loop runs are
        picked up by the same loop. An exception from an observer stops the
        loop and drops whatever was still pending.
        """
        state = cls._get_state()
        if state["is_propagating"]:
            return

        state["is_propagating"] = True
        try:
            while state["pending"]:
                observer, signal, event = state["pending"].popleft()
                # Observer may have been removed after the notification was queued
                if not signal.has_observer(observer):
                    continue
                observer(event)
        finally:
            state["is_propagating"] = False
            state["pending"].clear()

    @classmethod
    def _reset_state(cls) -> None:
        """Reset the propagation state for testing."""
        cls._local.__dict__.clear()


class BatchContext:
    """Collects emissions on one signal and delivers a single event on exit."""

    def __init__(self, signal: "ChangeSignal"):
        self.signal = signal
        self._is_outermost = False

    def __enter__(self):
        signal = self.signal
        with signal._lock:
            self._is_outermost = signal._batch_depth == 0
            signal._batch_depth += 1
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        signal = self.signal
        with signal._lock:
            signal._batch_depth -= 1
            if not self._is_outermost or signal._batch_depth:
                return
            deferred = signal._deferred
            signal._deferred = []

        if deferred:
            signal._deliver(coalesce(deferred))


def coalesce(events: List[ChangeEvent]) -> ChangeEvent:
    """Reduce a run of events to one: itself if alone, CHANGED otherwise."""
    if len(events) == 1:
        return events[0]
    return ChangeEvent.changed()


# ============================================================================
# CHANGE SIGNAL
# ============================================================================


class ChangeSignal:
    """
    An observable "contents changed" signal.

    Observers are plain callables receiving a :class:`ChangeEvent`. They are
    called in subscription order; subscribing the same callable twice has no
    effect.

    Example:
        ```python
        signal = ChangeSignal("fruits")
        signal.subscribe(lambda event: print(event.kind))
        signal.emit(ChangeEvent.inserted(0, 2))   # prints ChangeKind.ITEM_RANGE_INSERTED

        with signal.batch():
            signal.emit(ChangeEvent.removed(0, 1))
            signal.emit(ChangeEvent.inserted(3, 1))
        # prints ChangeKind.CHANGED once
        ```
    """

    def __init__(self, key: Optional[str] = None) -> None:
        self._key = key or "<unnamed>"
        self._observers: List[Callable] = []
        self._lock = threading.RLock()
        self._batch_depth = 0
        self._deferred: List[ChangeEvent] = []

    @property
    def key(self) -> str:
        return self._key

    @property
    def is_batching(self) -> bool:
        return self._batch_depth > 0

    def add_observer(self, observer: Callable) -> None:
        with self._lock:
            if observer not in self._observers:
                self._observers.append(observer)

    def remove_observer(self, observer: Callable) -> None:
        with self._lock:
            if observer in self._observers:
                self._observers.remove(observer)

    def has_observer(self, observer: Callable) -> bool:
        with self._lock:
            return observer in self._observers

    def observer_count(self) -> int:
        with self._lock:
            return len(self._observers)

    def subscribe(self, func: Callable) -> "ChangeSignal":
        self.add_observer(func)
        return self

    def unsubscribe(self, func: Callable) -> None:
        self.remove_observer(func)

    def emit(self, event: Optional[ChangeEvent] = None) -> None:
        """Notify observers, or defer the event while a batch is open."""
        if event is None:
            event = ChangeEvent.changed()

        with self._lock:
            if self._batch_depth:
                self._deferred.append(event)
                return

        self._deliver(event)

    def batch(self) -> BatchContext:
        return BatchContext(self)

    def _deliver(self, event: ChangeEvent) -> None:
        with self._lock:
            observers_snapshot = tuple(self._observers)

        for observer in observers_snapshot:
            PropagationContext._enqueue_notification(observer, self, event)

        PropagationContext._process_notifications()

    def __repr__(self) -> str:
        return f"ChangeSignal({self._key!r}, observers={self.observer_count()})"


def _reset_notification_state() -> None:
    PropagationContext._reset_state()

