"""Ledger reconciliation: merge client-held orders into the order store.

Customers keep their order history in a ledger on their own device. Pushing
that ledger here backfills orders the server has never seen and refreshes
contact details on the ones it has. Server status always wins: an envelope's
status is only used when the order is created from it.

Each envelope is handled independently and under its order's lock; a failing
envelope is recorded in the summary and never stops the batch. Replaying the
same batch leaves the store in the same state.
"""

import json
from dataclasses import dataclass, field
from datetime import UTC, datetime

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import DateTime, Float, String, Text
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.order.identity import get_identity_generator
from ordering.order.locks import order_lock
from ordering.order.order import ORDER_ID_PATTERN, Order
from ordering.utils.logging import order_log_context

logger = structlog.get_logger(__name__)


@ordering.command(part_of="Order")
class SyncOrder:
    """Create or refresh one order from a client ledger envelope."""

    order_id = String(required=True, max_length=20)
    customer_info = Text()  # JSON: {name, phone, address, email?}
    items = Text()  # JSON: list of {product_id, name, price, quantity, image?, sku?}
    total_amount = Float()  # As claimed by the client; recomputed on create
    status = String(max_length=20)
    notification_link = Text()
    created_at = DateTime()


@ordering.command_handler(part_of=Order)
class SyncOrderHandler:
    @handle(SyncOrder)
    def sync_order(self, command):
        repo = current_domain.repository_for(Order)
        customer_info = json.loads(command.customer_info) if command.customer_info else None

        try:
            order = repo.get(command.order_id)
        except ObjectNotFoundError:
            order = None

        if order is not None:
            if order.update_customer_info(customer_info, command.notification_link):
                repo.add(order)
                return "updated"
            return "unchanged"

        if customer_info is None:
            raise ValidationError({"customer_info": ["Customer info is required to create an order"]})

        items_data = json.loads(command.items) if command.items else []
        get_identity_generator().reserve(command.order_id)
        order = Order.import_from_ledger(
            order_id=command.order_id,
            customer_info=customer_info,
            items_data=items_data,
            status=command.status,
            notification_link=command.notification_link,
            created_at=command.created_at,
        )

        if command.total_amount is not None and abs(command.total_amount - order.total_amount) > 0.005:
            logger.warning(
                "Ledger total does not match its items; using recomputed total",
                order_id=order.order_id,
                claimed_total=command.total_amount,
                computed_total=order.total_amount,
            )

        repo.add(order)
        return "created"


# ---------------------------------------------------------------------------
# Batch entry point
# ---------------------------------------------------------------------------
@dataclass
class SyncSummary:
    synced_count: int = 0
    error_count: int = 0
    errors: list[dict] = field(default_factory=list)

    def record_error(self, order_id, error):
        self.error_count += 1
        self.errors.append({"order_id": order_id, "error": error})


def _line_from_envelope(item: dict) -> dict:
    return {
        "product_id": item.get("productId") or item.get("product_id"),
        "name": item.get("name"),
        "price": item.get("price"),
        "quantity": item.get("quantity"),
        "image": item.get("image"),
        "sku": item.get("sku"),
    }


def _parse_created_at(value):
    if not value:
        return None
    if isinstance(value, datetime):
        return value
    try:
        parsed = datetime.fromisoformat(str(value))
    except ValueError:
        raise ValidationError({"created_at": [f"Invalid timestamp: {value}"]}) from None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)


def command_from_envelope(envelope) -> SyncOrder:
    """Translate a camelCase ledger envelope into a SyncOrder command."""
    if not isinstance(envelope, dict):
        raise ValidationError({"order": ["Each order must be an object"]})

    order_id = envelope.get("orderId")
    if not order_id or not ORDER_ID_PATTERN.match(str(order_id)):
        raise ValidationError({"order_id": [f"Invalid order identifier: {order_id}"]})

    customer_info = envelope.get("customerInfo")
    items = envelope.get("items")
    if items is not None and not isinstance(items, list):
        raise ValidationError({"items": ["Items must be a list"]})

    return SyncOrder(
        order_id=str(order_id),
        customer_info=json.dumps(customer_info) if customer_info else None,
        items=json.dumps([_line_from_envelope(item) for item in items]) if items else None,
        total_amount=envelope.get("totalAmount"),
        status=envelope.get("status"),
        notification_link=envelope.get("notificationLink") or envelope.get("whatsappLink"),
        created_at=_parse_created_at(envelope.get("createdAt")),
    )


def _describe(error: Exception) -> str:
    if isinstance(error, ValidationError):
        return "; ".join(f"{name}: {', '.join(map(str, msgs))}" for name, msgs in error.messages.items())
    return str(error)


def sync_batch(envelopes) -> SyncSummary:
    """Reconcile a batch of ledger envelopes, one at a time.

    Raises:
        ValidationError: ``envelopes`` is not a list.
    """
    if not isinstance(envelopes, list):
        raise ValidationError({"orders": ["Orders array is required"]})

    summary = SyncSummary()
    for envelope in envelopes:
        order_id = envelope.get("orderId") if isinstance(envelope, dict) else None
        try:
            command = command_from_envelope(envelope)
            with order_log_context(command.order_id), order_lock(command.order_id):
                outcome = current_domain.process(command, asynchronous=False)
        except Exception as e:
            logger.warning("Failed to sync order", order_id=order_id, error=_describe(e))
            summary.record_error(order_id, _describe(e))
            continue

        summary.synced_count += 1
        logger.debug("Order synced", order_id=order_id, outcome=outcome)

    logger.info("Order ledger synced", synced_count=summary.synced_count, error_count=summary.error_count)
    return summary
