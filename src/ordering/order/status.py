"""Order status changes: commands, handler and the locked entry points.

Administrators move orders through the state machine one status at a time.
Each change for an order runs under that order's lock from load to commit, so
two racing requests cannot both read the same starting status.
"""

from concurrent.futures import Future
from dataclasses import dataclass

import structlog
from protean import handle
from protean.fields import String
from protean.utils.globals import current_domain

from ordering.catalogue import get_catalogue
from ordering.domain import ordering
from ordering.notification.dispatch import dispatch_status_message
from ordering.order.locks import order_lock
from ordering.order.order import Order, OrderStatus
from ordering.utils.logging import order_log_context
from shared.whatsapp import order_status_message

logger = structlog.get_logger(__name__)


@ordering.command(part_of="Order")
class ChangeOrderStatus:
    order_id = String(required=True, max_length=20)
    status = String(required=True, max_length=20)
    reason = String(max_length=500)


@ordering.command(part_of="Order")
class CancelOrder:
    order_id = String(required=True, max_length=20)
    reason = String(required=True, max_length=500)


# Statuses in which the order's quantities are held out of catalogue stock
_STOCK_HELD_STATUSES = frozenset(
    {OrderStatus.CONFIRMED.value, OrderStatus.PROCESSING.value, OrderStatus.SHIPPED.value}
)


def _sync_stock(order, previous_status):
    """Take stock on confirmation; give it back when a confirmed order is cancelled."""
    if order.status == OrderStatus.CONFIRMED.value and previous_status == OrderStatus.PENDING.value:
        sign = -1
    elif order.status == OrderStatus.CANCELLED.value and previous_status in _STOCK_HELD_STATUSES:
        sign = 1
    else:
        return

    catalogue = get_catalogue()
    for item in order.items:
        if catalogue.adjust_stock(str(item.product_id), sign * item.quantity) is None:
            logger.warning(
                "Product missing from catalogue; stock not adjusted",
                order_id=order.order_id,
                product_id=str(item.product_id),
            )


@ordering.command_handler(part_of=Order)
class OrderStatusHandler:
    @handle(ChangeOrderStatus)
    def change_status(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        previous = order.status
        order.transition(command.status, reason=command.reason)
        repo.add(order)
        _sync_stock(order, previous)

        logger.info(
            "Order status changed",
            order_id=order.order_id,
            from_status=previous,
            to_status=order.status,
        )
        return order.order_id

    @handle(CancelOrder)
    def cancel_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        previous = order.status
        order.cancel(command.reason)
        repo.add(order)
        _sync_stock(order, previous)

        logger.info("Order cancelled", order_id=order.order_id, reason=order.cancellation_reason)
        return order.order_id


@dataclass
class StatusChange:
    """Outcome of a status change.

    ``notification`` is the background dispatch of the customer message, or
    None when the new status is not announced. Callers may ignore it.
    """

    order: Order
    message: str
    notification: Future | None = None


def _apply(order_id: str, command) -> StatusChange:
    with order_log_context(order_id), order_lock(order_id):
        current_domain.process(command, asynchronous=False)
        order = current_domain.repository_for(Order).get(order_id)

    context = order.to_context()
    return StatusChange(
        order=order,
        message=order_status_message(context),
        notification=dispatch_status_message(context),
    )


def change_order_status(order_id: str, status: str, reason: str | None = None) -> StatusChange:
    return _apply(order_id, ChangeOrderStatus(order_id=order_id, status=status, reason=reason))


def cancel_order(order_id: str, reason: str) -> StatusChange:
    return _apply(order_id, CancelOrder(order_id=order_id, reason=reason))
