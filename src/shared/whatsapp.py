"""WhatsApp message templates and deep links shared by server and client.

Orders are announced to the shop operator through a ``wa.me`` deep link with
a prefilled message; status changes are announced to the customer with a
short status message. Everything here is pure string templating: opening the
link is left to whoever holds it.

Templates follow a ``render(context) -> dict`` contract where ``context`` is a
plain order dict with snake_case keys (``order_id``, ``customer_info``,
``items``, ``total_amount``, ``status``, ``cancellation_reason``).
"""

import os
import re
from datetime import UTC, datetime
from urllib.parse import quote

WHATSAPP_BASE_URL = "https://wa.me"
DIVIDER = "━━━━━━━━━━━━━━━━"


def currency_symbol() -> str:
    return os.environ.get("STORE_CURRENCY_SYMBOL", "₹")


def operator_phone() -> str:
    """WhatsApp number of the shop operator who receives new orders."""
    return os.environ.get("NOTIFICATION_OPERATOR_PHONE", "+919876543210")


def format_amount(amount) -> str:
    """Render an amount the way customers read it: no trailing ``.00``."""
    value = float(amount or 0)
    if value.is_integer():
        return f"{currency_symbol()}{int(value)}"
    return f"{currency_symbol()}{value:.2f}"


def _format_date(value) -> str:
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    value = value or datetime.now(UTC)
    return value.strftime("%d %b %Y, %H:%M")


def digits_only(phone: str) -> str:
    return re.sub(r"[^0-9]", "", phone or "")


def build_deep_link(phone: str, message: str) -> str:
    """Build a ``wa.me`` link addressed to ``phone`` carrying ``message``."""
    return f"{WHATSAPP_BASE_URL}/{digits_only(phone)}?text={quote(message, safe='')}"


class NewOrderTemplate:
    """Message the customer sends to the operator right after checkout."""

    @staticmethod
    def render(context: dict) -> dict:
        customer = context.get("customer_info") or {}

        lines = [
            "🛒 *New Order Received*",
            DIVIDER,
            "",
            f"📋 *Order ID:* {context.get('order_id', 'N/A')}",
            f"👤 *Customer:* {customer.get('name', '')}",
            f"📞 *Phone:* {customer.get('phone', '')}",
            f"📍 *Address:* {customer.get('address', '')}",
        ]
        if customer.get("email"):
            lines.append(f"📧 *Email:* {customer['email']}")

        lines += ["", "📦 *Order Items:*"]
        for index, item in enumerate(context.get("items") or [], start=1):
            quantity = item.get("quantity", 0)
            price = item.get("price", 0)
            lines += [
                f"{index}. {item.get('name', '')}",
                f"   SKU: {item.get('sku') or 'N/A'}",
                f"   Qty: {quantity} × {format_amount(price)} = {format_amount(quantity * price)}",
                "",
            ]

        lines += [
            DIVIDER,
            f"💰 *Total Amount: {format_amount(context.get('total_amount'))}*",
            "",
            f"📅 *Order Date:* {_format_date(context.get('created_at'))}",
            "",
            "Please confirm this order and provide delivery details. Thank you! 🙏",
        ]
        return {"body": "\n".join(lines)}


_STATUS_EMOJI = {
    "pending": "⏳",
    "confirmed": "✅",
    "processing": "⚙️",
    "shipped": "🚚",
    "delivered": "📦",
    "cancelled": "❌",
}

_STATUS_FOOTER = {
    "confirmed": "✅ Order confirmed! We will process your order shortly.",
    "cancelled": "❌ Order cancelled. Please contact us if you have any questions.",
}


class OrderStatusTemplate:
    """Customer-facing message announcing an order's current status."""

    @staticmethod
    def render(context: dict) -> dict:
        status = context.get("status", "pending")
        customer = context.get("customer_info") or {}

        lines = [
            f"{_STATUS_EMOJI.get(status, '')} *Order {status.upper()} #{context.get('order_id', 'N/A')}*",
            DIVIDER,
            f"👤 *Customer:* {customer.get('name', '')}",
            f"📱 *Phone:* {customer.get('phone', '')}",
            "",
            "📦 *Items:*",
        ]
        for item in context.get("items") or []:
            amount = item.get("price", 0) * item.get("quantity", 0)
            lines.append(f"• {item.get('name', '')} x{item.get('quantity', 0)} - {format_amount(amount)}")

        lines += [DIVIDER, f"💰 *Total: {format_amount(context.get('total_amount'))}*", ""]
        if status == "cancelled" and context.get("cancellation_reason"):
            lines.append(f"📝 *Reason:* {context['cancellation_reason']}")
        lines.append(_STATUS_FOOTER.get(status, "⏳ Order is being processed. We will update you soon."))
        return {"body": "\n".join(lines)}


def order_notification_link(order: dict, phone: str | None = None) -> str:
    """Deep link that opens a chat with the operator prefilled with the new order."""
    return build_deep_link(phone or operator_phone(), NewOrderTemplate.render(order)["body"])


def order_status_message(order: dict) -> str:
    return OrderStatusTemplate.render(order)["body"]
