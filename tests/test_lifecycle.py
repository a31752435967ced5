"""Tests for subscription lifetime: a composite never outlives its owner."""

import gc
import weakref

import pytest

from joinx import CompositeList, ListSource, SourceBinding, static_binding

from tests.utils import (
    InstanceTracker,
    SubscriptionLedger,
    assert_no_leak,
    assert_released,
)

pytestmark = pytest.mark.lifecycle


def test_subscribes_once_per_binding():
    """Auto update adds exactly one observer to each source."""
    first = ListSource(["a"])
    second = ListSource(["b"])

    composite = CompositeList(first, second)

    assert first.observer_count() == 1
    assert second.observer_count() == 1
    assert not composite.closed


def test_shared_source_gets_one_subscription_per_binding():
    """Binding the same source twice subscribes twice."""
    rows = ListSource(["a"])

    composite = CompositeList(rows, rows)

    assert rows.observer_count() == 2
    assert composite.item_count() == 2


def test_manual_mode_does_not_subscribe():
    """With auto update off the sources stay untouched."""
    rows = ListSource(["a"])

    CompositeList(rows, auto_update=False)

    assert rows.observer_count() == 0


def test_close_unsubscribes_everything():
    """close() removes every subscription the composite made."""
    first = ListSource(["a"])
    second = ListSource(["b"])
    composite = CompositeList(first, second)

    composite.close()

    assert first.observer_count() == 0
    assert second.observer_count() == 0
    assert composite.closed


def test_close_is_idempotent():
    """Closing twice is harmless."""
    rows = ListSource(["a"])
    composite = CompositeList(rows)

    composite.close()
    composite.close()

    assert rows.observer_count() == 0


def test_closed_composite_stops_following_sources(recorder):
    """After close() source changes no longer rebuild or notify."""
    rows = ListSource(["a"])
    composite = CompositeList(rows)
    composite.subscribe(recorder)

    composite.close()
    rows.append("b")

    assert composite.item_count() == 1
    assert recorder.events == []


def test_closed_composite_still_accepts_manual_notify():
    """A closed composite can still be refreshed by hand."""
    rows = ListSource(["a"])
    composite = CompositeList(rows)
    composite.close()

    rows.append("b")
    composite.notify_changed()

    assert composite.item_count() == 2


def test_context_manager_closes_on_exit():
    """Leaving the with-block detaches from sources."""
    rows = ListSource(["a"])

    with CompositeList(rows) as composite:
        assert rows.observer_count() == 1

    assert composite.closed
    assert rows.observer_count() == 0


def test_garbage_collection_unsubscribes():
    """Dropping the last reference detaches from every source."""
    rows = ListSource(["a"])
    composite = CompositeList(rows)
    composite_ref = weakref.ref(composite)

    del composite
    gc.collect()

    assert composite_ref() is None
    assert rows.observer_count() == 0


def test_source_does_not_keep_composite_alive():
    """A live, subscribed source never retains the composite."""
    rows = ListSource(["a", "b"])

    assert_released(lambda: CompositeList(rows), "Composite subscribed to a live source")
    assert rows.observer_count() == 0


def test_source_change_after_collection_is_harmless():
    """Mutating a source after its composite is gone raises nothing."""
    rows = ListSource(["a"])
    CompositeList(rows)
    gc.collect()

    rows.append("b")

    assert rows.observer_count() == 0


def test_repeated_composites_do_not_leak():
    """Creating and dropping many composites over one source leaks none."""
    rows = ListSource(range(10))

    def operation():
        for _ in range(50):
            composite = CompositeList(SourceBinding(rows), stable_ids=True)
            composite.item_count()
            del composite

    with SubscriptionLedger(rows) as ledger:
        assert_no_leak(operation, CompositeList, SourceBinding)

    ledger.assert_restored()


def test_no_lingering_bindings_after_discard():
    """Bindings created for a discarded composite are released too."""
    rows = ListSource(["a"])

    with InstanceTracker() as tracker:
        CompositeList(rows, static_binding(type_tag="footer"))

    tracker.assert_no_growth()
    assert set(tracker.growth) == {"CompositeList", "SourceBinding"}


def test_ledger_reports_open_subscriptions():
    """A composite still alive shows up as one extra observer per source."""
    first = ListSource(["a"])
    second = ListSource(["b"])

    with SubscriptionLedger(first, second) as ledger:
        composite = CompositeList(first, second)

    assert ledger.added() == [1, 1]
    with pytest.raises(AssertionError, match="left behind"):
        ledger.assert_restored()

    composite.close()
    ledger.assert_restored()


def test_nested_composite_released_with_outer():
    """Dropping an outer composite frees it while the inner one stays subscribed."""
    rows = ListSource(["a"])
    inner = CompositeList(rows)

    with SubscriptionLedger(rows, inner) as ledger:
        assert_released(lambda: CompositeList(inner), "Outer composite")

    ledger.assert_restored()
    assert rows.observer_count() == 1
