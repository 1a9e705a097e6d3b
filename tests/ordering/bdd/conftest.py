"""Shared BDD fixtures and step definitions for the Ordering domain."""

import pytest
from ordering.errors import ConflictError
from ordering.order.creation import place_order
from ordering.order.order import Order
from ordering.order.status import change_order_status
from protean import current_domain
from pytest_bdd import given, parsers, then

_PATH_TO = {
    "pending": [],
    "confirmed": ["confirmed"],
    "processing": ["confirmed", "processing"],
    "shipped": ["confirmed", "shipped"],
    "delivered": ["confirmed", "shipped", "delivered"],
    "cancelled": ["cancelled"],
}


@pytest.fixture()
def outcome():
    """Container for what the When step produced."""
    return {"change": None, "error": None}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given("a pending order", target_fixture="order_id")
def _(catalogue, customer_info):
    return place_order(customer_info, [{"product_id": "prod-001", "quantity": 1}]).order_id


@given(parsers.parse('an order with status "{status}"'), target_fixture="order_id")
def _(catalogue, customer_info, status):
    order_id = place_order(customer_info, [{"product_id": "prod-001", "quantity": 1}]).order_id
    for step in _PATH_TO[status]:
        change_order_status(order_id, step)
    return order_id


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.parse('the order status is "{status}"'))
def _(order_id, status):
    assert current_domain.repository_for(Order).get(order_id).status == status


@then("the change is rejected as a conflict")
def _(outcome):
    assert isinstance(outcome["error"], ConflictError)


@then(parsers.parse('the cancellation reason is "{reason}"'))
def _(order_id, reason):
    assert current_domain.repository_for(Order).get(order_id).cancellation_reason == reason


@then("the customer is sent a status message")
def _(outcome, notifier):
    result = outcome["change"].notification.result(timeout=5)
    assert result["status"] == "sent"
    assert notifier.messages_to("+919812345678")
