"""Application tests for orders created and changed from many threads at once."""

import threading

from ordering.domain import ordering
from ordering.errors import ConflictError
from ordering.order.creation import place_order
from ordering.order.order import Order
from ordering.order.status import change_order_status
from protean import current_domain


def _run_together(count, fn):
    """Start ``count`` threads on ``fn`` behind a barrier and collect what each returns."""
    barrier = threading.Barrier(count)
    outcomes = [None] * count

    def worker(index):
        with ordering.domain_context():
            barrier.wait(5)
            try:
                outcomes[index] = fn()
            except Exception as exc:
                outcomes[index] = exc

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(count)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(10)
    return outcomes


class TestParallelCheckout:
    def test_every_order_gets_its_own_identity(self, catalogue, customer_info):
        outcomes = _run_together(16, lambda: place_order(customer_info, [{"product_id": "prod-001", "quantity": 1}]))

        assert all(isinstance(order, Order) for order in outcomes)
        order_ids = {order.order_id for order in outcomes}
        assert len(order_ids) == 16
        for order_id in order_ids:
            assert current_domain.repository_for(Order).get(order_id).status == "pending"


class TestParallelStatusChanges:
    def test_only_one_confirmation_wins(self, placed_order, catalogue):
        stock_before = catalogue.get_product("prod-001")["stock"]

        outcomes = _run_together(4, lambda: change_order_status(placed_order.order_id, "confirmed"))

        conflicts = [outcome for outcome in outcomes if isinstance(outcome, ConflictError)]
        assert len(conflicts) == 3
        assert sum(1 for outcome in outcomes if not isinstance(outcome, Exception)) == 1
        assert catalogue.get_product("prod-001")["stock"] == stock_before - 2
        assert current_domain.repository_for(Order).get(placed_order.order_id).status == "confirmed"
