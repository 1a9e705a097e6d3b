"""Checkout orchestration.

Placing the order on the server is the only step that can fail a checkout.
Everything after it (recording the order in the ledger, emptying the cart and
handing the notification link to the customer) is best-effort: each step is
recorded as a ``StepOutcome`` and a failing step never undoes the order.
"""

import webbrowser
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

import structlog

from shared.whatsapp import order_notification_link
from storefront.errors import EmptyCartError, ProductUnavailable, StaleCartItemError, TransientClientError
from storefront.models import CustomerDetails, OrderSnapshot

logger = structlog.get_logger(__name__)

LINK_COPIED_MESSAGE = (
    "WhatsApp could not be opened automatically. "
    "The order link was copied to your clipboard; paste it in your browser to notify the shop."
)
LINK_UNAVAILABLE_MESSAGE = (
    "WhatsApp could not be opened automatically. "
    "Open this link to notify the shop about your order: {link}"
)


# ---------------------------------------------------------------------------
# Ports
# ---------------------------------------------------------------------------
class LinkOpener(ABC):
    @abstractmethod
    def open(self, url: str) -> bool:
        """Open ``url`` for the customer. False when the attempt was blocked."""


class Clipboard(ABC):
    @abstractmethod
    def copy(self, text: str) -> bool:
        """Place ``text`` on the clipboard. False when unavailable."""


class WebBrowserOpener(LinkOpener):
    def open(self, url: str) -> bool:
        try:
            return webbrowser.open(url, new=2)
        except webbrowser.Error as e:
            raise TransientClientError(str(e)) from e


class MemoryClipboard(Clipboard):
    """Clipboard that just remembers the last copied text."""

    def __init__(self):
        self.text: str | None = None

    def copy(self, text: str) -> bool:
        self.text = text
        return True


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------
@dataclass
class StepOutcome:
    name: str
    succeeded: bool
    error: str | None = None


@dataclass
class CheckoutResult:
    order_id: str
    order: OrderSnapshot
    notification_link: str
    steps: list[StepOutcome] = field(default_factory=list)
    message: str | None = None

    def step(self, name: str) -> StepOutcome | None:
        return next((outcome for outcome in self.steps if outcome.name == name), None)


class CheckoutOrchestrator:
    def __init__(self, cart, ledger, api, link_opener: LinkOpener, clipboard: Clipboard):
        self.cart = cart
        self.ledger = ledger
        self.api = api
        self.link_opener = link_opener
        self.clipboard = clipboard

    def checkout(self, form) -> CheckoutResult:
        items = self.cart.items
        if not items:
            raise EmptyCartError()

        customer = form if isinstance(form, CustomerDetails) else CustomerDetails.model_validate(form)

        try:
            order, link = self.api.create_order(customer, items)
        except ProductUnavailable as e:
            logger.warning("Cart references an unavailable product", product_id=e.product_id)
            self.cart.remove_invalid_products([e.product_id])
            raise StaleCartItemError(e.product_id, e.product_name) from e

        link = link or order.notification_link or order_notification_link(order.model_dump())
        result = CheckoutResult(order_id=order.order_id, order=order, notification_link=link)
        logger.info("Order placed", order_id=order.order_id, total_amount=order.total_amount)

        self._run_step(result, "ledger", lambda: self.ledger.append(order, link))
        self._run_step(result, "clear_cart", self.cart.clear_cart)
        self._notify(result)
        return result

    def _run_step(self, result: CheckoutResult, name: str, action) -> bool:
        try:
            action()
        except Exception as exc:
            logger.warning("Checkout step failed", step=name, order_id=result.order_id, error=str(exc))
            result.steps.append(StepOutcome(name=name, succeeded=False, error=str(exc)))
            return False
        result.steps.append(StepOutcome(name=name, succeeded=True))
        return True

    def _notify(self, result: CheckoutResult) -> None:
        try:
            opened = self.link_opener.open(result.notification_link)
        except TransientClientError as e:
            logger.info("Notification link blocked", order_id=result.order_id, error=str(e))
            opened = False

        if opened:
            result.steps.append(StepOutcome(name="notify", succeeded=True))
            return

        copied = False
        try:
            copied = self.clipboard.copy(result.notification_link)
        except Exception as exc:
            logger.warning("Could not copy notification link", order_id=result.order_id, error=str(exc))

        if copied:
            result.message = LINK_COPIED_MESSAGE
        else:
            result.message = LINK_UNAVAILABLE_MESSAGE.format(link=result.notification_link)
        result.steps.append(StepOutcome(name="notify", succeeded=False, error="link not opened"))
