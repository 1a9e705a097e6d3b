"""Tests for the striped per-order locks."""

from ordering.order import locks
from ordering.order.locks import LOCK_STRIPES, _lock_for, order_lock


class TestOrderLocks:
    def test_same_order_always_maps_to_the_same_lock(self):
        assert _lock_for("ORD-20261019-0001") is _lock_for("ORD-20261019-0001")

    def test_lock_pool_stays_bounded(self):
        distinct = {id(_lock_for(f"ORD-20261019-{n:04d}")) for n in range(1, 5000)}
        assert len(distinct) <= LOCK_STRIPES
        assert len(locks._stripes) == LOCK_STRIPES

    def test_lock_is_held_inside_the_block(self):
        with order_lock("ORD-20261019-0001"):
            assert _lock_for("ORD-20261019-0001").locked()
        assert not _lock_for("ORD-20261019-0001").locked()
