"""Order creation: command, handler and the checkout entry point.

Order lines are priced from the catalogue, never from the client: every
product is resolved and its current name, price, image and sku copied onto
the line before an identity is reserved for the order.
"""

import json

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import String, Text
from protean.utils.globals import current_domain

from ordering.catalogue import get_catalogue
from ordering.domain import ordering
from ordering.errors import ConflictError, ProductUnavailableError
from ordering.order.identity import get_identity_generator
from ordering.order.locks import order_lock
from ordering.order.order import CustomerInfo, Order, customer_fields
from shared.whatsapp import order_notification_link

logger = structlog.get_logger(__name__)


@ordering.command(part_of="Order")
class CreateOrder:
    """Persist a priced order under an identity reserved for it."""

    order_id = String(required=True, max_length=20)
    customer_info = Text(required=True)  # JSON: {name, phone, address, email?}
    items = Text(required=True)  # JSON: list of priced lines


@ordering.command_handler(part_of=Order)
class CreateOrderHandler:
    @handle(CreateOrder)
    def create_order(self, command):
        customer_info = (
            json.loads(command.customer_info) if isinstance(command.customer_info, str) else command.customer_info
        )
        items_data = json.loads(command.items) if isinstance(command.items, str) else command.items

        repo = current_domain.repository_for(Order)
        try:
            repo.get(command.order_id)
        except ObjectNotFoundError:
            pass
        else:
            raise ConflictError(f"Order {command.order_id} already exists", order_id=command.order_id)

        order = Order.create(order_id=command.order_id, customer_info=customer_info, items_data=items_data)
        order.notification_link = order_notification_link(order.to_context())
        repo.add(order)

        logger.info(
            "Order placed",
            order_id=order.order_id,
            item_count=len(order.items),
            total_amount=order.total_amount,
        )
        return order.order_id


def price_order_lines(items_data):
    """Resolve cart lines against the catalogue into priced order lines.

    Args:
        items_data: List of dicts with product_id, quantity and optionally
                    the name the customer saw.

    Raises:
        ProductUnavailableError: a product no longer exists.
        ValidationError: a product is inactive, out of stock, or ordered
            above its per-order cap.
    """
    if not items_data:
        raise ValidationError({"items": ["Order must contain at least one item"]})

    catalogue = get_catalogue()
    lines = []
    for item in items_data:
        product_id = str(item["product_id"])
        quantity = int(item["quantity"])

        product = catalogue.get_product(product_id)
        if product is None:
            raise ProductUnavailableError(product_id, item.get("name"))

        name = product["name"]
        if not product.get("is_active", True):
            raise ValidationError({"items": [f"Product {name} is not available"]})
        if quantity < 1:
            raise ValidationError({"items": [f"Quantity for {name} must be at least 1"]})
        if product.get("stock", 0) < quantity:
            raise ValidationError({"items": [f"Insufficient stock for {name}. Available: {product.get('stock', 0)}"]})
        max_quantity = product.get("max_order_quantity") or 10
        if quantity > max_quantity:
            raise ValidationError({"items": [f"Maximum order quantity for {name} is {max_quantity}"]})

        images = product.get("images") or []
        lines.append(
            {
                "product_id": product_id,
                "name": name,
                "price": product.get("discount_price") or product["price"],
                "quantity": quantity,
                "image": images[0] if images else None,
                "sku": product.get("sku"),
            }
        )
    return lines


def place_order(customer_info: dict, items: list[dict]) -> Order:
    """Validate, price and persist a checkout.

    The identity is only reserved once the customer details and every line
    have passed validation, and the order is written under that identity's
    lock so a concurrent ledger sync cannot claim it first.
    """
    CustomerInfo(**customer_fields(customer_info))
    lines = price_order_lines(items)

    order_id = get_identity_generator().next_id()
    command = CreateOrder(
        order_id=order_id,
        customer_info=json.dumps(customer_fields(customer_info)),
        items=json.dumps(lines),
    )
    with order_lock(order_id):
        current_domain.process(command, asynchronous=False)
    return current_domain.repository_for(Order).get(order_id)
