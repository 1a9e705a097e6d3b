"""Status message dispatch: tells the customer their order moved.

Dispatch runs as a background task: the caller gets a ``Future`` it may wait
on or ignore. One attempt is made per status change; a failed attempt is
logged and reported through the future's result, and never undoes the status
change that triggered it.
"""

from concurrent.futures import Future, ThreadPoolExecutor

import structlog

from ordering.notification import get_notifier
from ordering.order.order import OrderStatus
from shared.whatsapp import order_status_message

logger = structlog.get_logger(__name__)

# Statuses the customer is told about
NOTIFIED_STATUSES = frozenset({OrderStatus.CONFIRMED.value, OrderStatus.CANCELLED.value})

_executor = ThreadPoolExecutor(max_workers=4, thread_name_prefix="order-notify")


def _send(order_id: str, phone: str, body: str) -> dict:
    try:
        result = get_notifier().send(to=phone, body=body)
    except Exception as e:
        logger.error(
            "Status message dispatch failed",
            order_id=order_id,
            error=str(e),
        )
        return {"message_id": None, "status": "failed", "error": str(e)}

    if result.get("status") == "sent":
        logger.info("Status message sent", order_id=order_id, message_id=result.get("message_id"))
    else:
        logger.warning(
            "Status message not delivered",
            order_id=order_id,
            error=result.get("error", "Unknown dispatch error"),
        )
    return result


def dispatch_status_message(order_context: dict) -> Future | None:
    """Queue the status message for ``order_context`` when its status is notified.

    Returns:
        A Future resolving to the adapter's result dict, or None when the
        order's status does not warrant a message.
    """
    if order_context.get("status") not in NOTIFIED_STATUSES:
        return None

    body = order_status_message(order_context)
    phone = order_context["customer_info"]["phone"]
    return _executor.submit(_send, order_context["order_id"], phone, body)
