"""Read side of the order store: lookups, admin listing and the public status view."""

import math

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from ordering.order.order import ORDER_ID_PATTERN, Order, parse_status


def find_order(order_id: str) -> Order:
    """Load an order by its identity.

    Raises:
        ObjectNotFoundError: no order carries ``order_id``.
    """
    if not ORDER_ID_PATTERN.match(order_id or ""):
        raise ObjectNotFoundError(f"Order {order_id} not found")
    try:
        return current_domain.repository_for(Order).get(order_id)
    except ObjectNotFoundError:
        raise ObjectNotFoundError(f"Order {order_id} not found") from None


def list_orders(status=None, page=1, limit=20, created_from=None, created_to=None, search=None):
    """Newest-first page of orders for administrators.

    ``search`` narrows the page to orders whose id, customer name, phone or
    item names contain the term, ignoring case.

    Returns:
        (orders, pagination) where pagination has current, pages, total and limit.
    """
    if status:
        status = parse_status(status).value
    orders, total = current_domain.repository_for(Order).find_page(
        status=status,
        created_from=created_from,
        created_to=created_to,
        search=search,
        page=page,
        limit=limit,
    )
    pagination = {
        "current": page,
        "pages": math.ceil(total / limit) if total else 0,
        "total": total,
        "limit": limit,
    }
    return orders, pagination
