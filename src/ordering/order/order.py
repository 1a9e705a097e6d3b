"""Order aggregate (CQRS): the authoritative record of a customer order.

Orders are placed from the storefront checkout or backfilled from a client
ledger, and then moved through their lifecycle by an administrator.

State Machine (6 states):
    PENDING → CONFIRMED → PROCESSING → SHIPPED → DELIVERED
    CONFIRMED → SHIPPED (skipping processing)
    CANCELLED (from PENDING, CONFIRMED, PROCESSING)
    DELIVERED and CANCELLED are terminal.
"""

import json
import re
from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import (
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
    ValueObject,
)

from ordering.domain import ordering
from ordering.errors import ConflictError
from ordering.order.events import (
    OrderCancelled,
    OrderConfirmed,
    OrderDelivered,
    OrderDetailsReconciled,
    OrderImported,
    OrderPlaced,
    OrderProcessing,
    OrderShipped,
)

ORDER_ID_PATTERN = re.compile(r"^ORD-(\d{8})-(\d{4})$")
PHONE_PATTERN = re.compile(r"^\+?[1-9]\d{1,14}$")
EMAIL_PATTERN = re.compile(r"^\w+([.-]?\w+)*@\w+([.-]?\w+)*(\.\w{2,3})+$")
MIN_ADDRESS_LENGTH = 10
DEFAULT_CANCELLATION_REASON = "Cancelled by admin"


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


# State machine transition map
_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.CONFIRMED, OrderStatus.CANCELLED},
    OrderStatus.CONFIRMED: {OrderStatus.PROCESSING, OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
}

TERMINAL_STATUSES = frozenset(status for status, targets in _VALID_TRANSITIONS.items() if not targets)

# Timestamp recorded when an order enters each status
_STATUS_TIMESTAMPS = {
    OrderStatus.CONFIRMED: "confirmed_at",
    OrderStatus.PROCESSING: "processing_at",
    OrderStatus.SHIPPED: "shipped_at",
    OrderStatus.DELIVERED: "delivered_at",
    OrderStatus.CANCELLED: "cancelled_at",
}


def parse_status(value) -> OrderStatus:
    """Resolve a status string, rejecting anything outside the known set."""
    try:
        return OrderStatus(value)
    except ValueError:
        allowed = ", ".join(status.value for status in OrderStatus)
        raise ValidationError({"status": [f"Invalid status {value!r}. Must be one of: {allowed}"]}) from None


def can_transition(current, target) -> bool:
    return OrderStatus(target) in _VALID_TRANSITIONS.get(OrderStatus(current), set())


def customer_fields(data: dict) -> dict:
    """Keep only the customer fields an order stores, trimming whitespace."""
    fields = {}
    for key in ("name", "phone", "address", "email"):
        value = data.get(key)
        if isinstance(value, str):
            value = value.strip() or None
        fields[key] = value
    return fields


def compute_total(items) -> float:
    """Sum of price × quantity over order lines, rounded to cents."""
    return round(sum(item.price * item.quantity for item in items), 2)


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@ordering.value_object(part_of="Order")
class CustomerInfo:
    """Contact and delivery details captured at checkout.

    Orders are placed without an account, so these details are the only way
    the operator can reach the customer.
    """

    name = String(required=True, max_length=100)
    phone = String(required=True, max_length=20)
    address = String(required=True, max_length=500)
    email = String(max_length=254)

    @invariant.post
    def name_must_not_be_blank(self):
        if not (self.name or "").strip():
            raise ValidationError({"name": ["Customer name is required"]})

    @invariant.post
    def phone_must_be_valid(self):
        if not PHONE_PATTERN.match(self.phone or ""):
            raise ValidationError({"phone": ["Please provide a valid phone number"]})

    @invariant.post
    def address_must_be_complete(self):
        if len((self.address or "").strip()) < MIN_ADDRESS_LENGTH:
            raise ValidationError({"address": [f"Address must be at least {MIN_ADDRESS_LENGTH} characters long"]})

    @invariant.post
    def email_must_be_valid_when_present(self):
        if self.email and not EMAIL_PATTERN.match(self.email):
            raise ValidationError({"email": ["Please provide a valid email address"]})

    def to_context(self) -> dict:
        return {"name": self.name, "phone": self.phone, "address": self.address, "email": self.email}


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@ordering.entity(part_of="Order")
class OrderItem:
    """A snapshot of a catalogue product at the moment the order was placed.

    ``product_id`` is a lookup-only reference: the product may later change or
    disappear without affecting the order.
    """

    product_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    price = Float(required=True, min_value=0.0)
    quantity = Integer(required=True, min_value=1)
    image = String(max_length=1000)
    sku = String(max_length=50)

    def to_context(self) -> dict:
        return {
            "product_id": str(self.product_id),
            "name": self.name,
            "price": self.price,
            "quantity": self.quantity,
            "image": self.image,
            "sku": self.sku,
        }


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@ordering.aggregate
class Order:
    order_id = String(identifier=True, max_length=20)
    customer_info = ValueObject(CustomerInfo, required=True)
    items = HasMany(OrderItem)
    total_amount = Float(default=0.0, min_value=0.0)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    confirmed_at = DateTime()
    processing_at = DateTime()
    shipped_at = DateTime()
    delivered_at = DateTime()
    cancelled_at = DateTime()
    cancellation_reason = String(max_length=500)
    notification_link = Text()
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def order_must_have_items(self):
        if not self.items:
            raise ValidationError({"items": ["Order must contain at least one item"]})

    @invariant.post
    def order_id_must_be_well_formed(self):
        if not ORDER_ID_PATTERN.match(self.order_id or ""):
            raise ValidationError({"order_id": [f"Invalid order identifier: {self.order_id}"]})

    # -------------------------------------------------------------------
    # Factories
    # -------------------------------------------------------------------
    @classmethod
    def _build(cls, order_id, customer_info, items_data, status, created_at, notification_link=None):
        items = [
            OrderItem(
                product_id=item["product_id"],
                name=item["name"],
                price=item["price"],
                quantity=item["quantity"],
                image=item.get("image"),
                sku=item.get("sku"),
            )
            for item in items_data
        ]
        return cls(
            order_id=order_id,
            customer_info=CustomerInfo(**customer_fields(customer_info)),
            items=items,
            total_amount=compute_total(items),
            status=status,
            notification_link=notification_link,
            created_at=created_at,
            updated_at=created_at,
        )

    @classmethod
    def create(cls, order_id, customer_info, items_data, created_at=None):
        """Place a new order from checkout data.

        Args:
            order_id: Identity already reserved for this order.
            customer_info: Dict with name, phone, address and optional email.
            items_data: List of dicts with product_id, name, price, quantity,
                        image and sku, already priced from the catalogue.
        """
        if not items_data:
            raise ValidationError({"items": ["Order must contain at least one item"]})

        now = created_at or datetime.now(UTC)
        order = cls._build(order_id, customer_info, items_data, OrderStatus.PENDING.value, now)

        order.raise_(
            OrderPlaced(
                order_id=order.order_id,
                customer_name=order.customer_info.name,
                customer_phone=order.customer_info.phone,
                item_count=len(order.items),
                total_amount=order.total_amount,
                created_at=now,
            )
        )
        return order

    @classmethod
    def import_from_ledger(cls, order_id, customer_info, items_data, status=None, notification_link=None, created_at=None):
        """Backfill an order that so far only existed in a client ledger.

        The total is recomputed from the lines; the client's own figure is
        never stored.
        """
        if not items_data:
            raise ValidationError({"items": ["Order must contain at least one item"]})

        target = parse_status(status or OrderStatus.PENDING.value)
        now = created_at or datetime.now(UTC)
        order = cls._build(order_id, customer_info, items_data, target.value, now, notification_link)

        timestamp_field = _STATUS_TIMESTAMPS.get(target)
        if timestamp_field:
            setattr(order, timestamp_field, now)

        order.raise_(
            OrderImported(
                order_id=order.order_id,
                status=order.status,
                total_amount=order.total_amount,
                created_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # State transitions
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target_status):
        """Validate that the current state allows transition to target."""
        current = OrderStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise ConflictError(
                f"Cannot transition order from {current.value} to {target_status.value}",
                order_id=self.order_id,
            )

    def transition(self, new_status, reason=None):
        """Move the order to ``new_status``, recording when it got there."""
        target = parse_status(new_status)
        self._assert_can_transition(target)

        now = datetime.now(UTC)
        self.status = target.value
        setattr(self, _STATUS_TIMESTAMPS[target], now)
        if target == OrderStatus.CANCELLED:
            self.cancellation_reason = reason or DEFAULT_CANCELLATION_REASON
        self.updated_at = now

        self.raise_(self._transition_event(target, now))

    def _transition_event(self, target, now):
        if target == OrderStatus.CONFIRMED:
            return OrderConfirmed(order_id=self.order_id, confirmed_at=now)
        if target == OrderStatus.PROCESSING:
            return OrderProcessing(order_id=self.order_id, processing_at=now)
        if target == OrderStatus.SHIPPED:
            return OrderShipped(order_id=self.order_id, shipped_at=now)
        if target == OrderStatus.DELIVERED:
            return OrderDelivered(order_id=self.order_id, delivered_at=now)
        return OrderCancelled(order_id=self.order_id, reason=self.cancellation_reason, cancelled_at=now)

    def cancel(self, reason):
        if not (reason or "").strip():
            raise ValidationError({"reason": ["Cancellation reason is required"]})
        self.transition(OrderStatus.CANCELLED.value, reason=reason.strip())

    # -------------------------------------------------------------------
    # Reconciliation
    # -------------------------------------------------------------------
    def update_customer_info(self, customer_info=None, notification_link=None):
        """Refresh contact details and the notification link from a client ledger.

        Status is never touched by reconciliation.
        Returns True when anything changed.
        """
        changed_info = None
        if customer_info:
            candidate = CustomerInfo(**customer_fields(customer_info))
            if candidate != self.customer_info:
                self.customer_info = candidate
                changed_info = candidate.to_context()

        changed_link = None
        if notification_link and notification_link != self.notification_link:
            self.notification_link = notification_link
            changed_link = notification_link

        if changed_info is None and changed_link is None:
            return False

        self.updated_at = datetime.now(UTC)
        self.raise_(
            OrderDetailsReconciled(
                order_id=self.order_id,
                customer_info=json.dumps(changed_info) if changed_info else None,
                notification_link=changed_link,
            )
        )
        return True

    # -------------------------------------------------------------------
    # Views
    # -------------------------------------------------------------------
    @property
    def is_terminal(self) -> bool:
        return OrderStatus(self.status) in TERMINAL_STATUSES

    def to_context(self) -> dict:
        """Plain dict used by message templates."""
        return {
            "order_id": self.order_id,
            "customer_info": self.customer_info.to_context(),
            "items": [item.to_context() for item in self.items],
            "total_amount": self.total_amount,
            "status": self.status,
            "cancellation_reason": self.cancellation_reason,
            "created_at": self.created_at,
        }
