import pytest


@pytest.fixture()
def customer_info():
    return {
        "name": "Asha Rao",
        "phone": "+919812345678",
        "address": "12 MG Road, Bengaluru 560001",
        "email": "asha@example.com",
    }


@pytest.fixture()
def placed_order(catalogue, customer_info):
    """A pending order for two scarves, placed through checkout."""
    from ordering.order.creation import place_order

    return place_order(customer_info, [{"product_id": "prod-001", "quantity": 2}])


@pytest.fixture()
def notifier():
    from ordering.notification import get_notifier

    return get_notifier()
