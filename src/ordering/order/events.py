"""Domain events for the Order aggregate.

Each status the administrator moves an order into has its own event, so the
event stream doubles as an audit trail of the order's lifecycle.
"""

from protean.fields import DateTime, Float, Integer, String, Text

from ordering.domain import ordering


@ordering.event(part_of="Order")
class OrderPlaced:
    """A customer placed a new order through checkout."""

    __version__ = 1

    order_id = String(required=True)
    customer_name = String(required=True)
    customer_phone = String(required=True)
    item_count = Integer(required=True)
    total_amount = Float(required=True)
    created_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderImported:
    """An order known only to a client ledger was backfilled into the store."""

    __version__ = 1

    order_id = String(required=True)
    status = String(required=True)
    total_amount = Float(required=True)
    created_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderDetailsReconciled:
    """Customer details or the notification link were refreshed from a client ledger."""

    __version__ = 1

    order_id = String(required=True)
    customer_info = Text()  # JSON: customer info dict, when it changed
    notification_link = Text()


@ordering.event(part_of="Order")
class OrderConfirmed:
    __version__ = 1

    order_id = String(required=True)
    confirmed_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderProcessing:
    __version__ = 1

    order_id = String(required=True)
    processing_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderShipped:
    __version__ = 1

    order_id = String(required=True)
    shipped_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderDelivered:
    __version__ = 1

    order_id = String(required=True)
    delivered_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderCancelled:
    """An administrator cancelled the order."""

    __version__ = 1

    order_id = String(required=True)
    reason = String(required=True)
    cancelled_at = DateTime(required=True)
