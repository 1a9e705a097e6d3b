"""Storefront client composition root.

Wires storage, stores, the API client and checkout together. Everything is
injectable; ``Storefront.from_env`` builds the default wiring.
"""

import os

import structlog

from storefront.api import HttpStorefrontApi
from storefront.cart import CartStore
from storefront.checkout import CheckoutOrchestrator, MemoryClipboard, WebBrowserOpener
from storefront.favorites import FavoritesStore
from storefront.ledger import OrderLedger, push_ledger
from storefront.polling import OrderStatusPoller
from storefront.storage import JsonFileStorage
from storefront.tasks import BackgroundTasks

logger = structlog.get_logger(__name__)

DEFAULT_API_URL = "http://localhost:8000"
DEFAULT_DATA_DIR = ".storefront"
DEFAULT_POLL_INTERVAL = 30.0


class Storefront:
    def __init__(
        self,
        storage,
        api,
        tasks=None,
        link_opener=None,
        clipboard=None,
        report_error=None,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ):
        self.storage = storage
        self.api = api
        self.tasks = tasks or BackgroundTasks()
        self.poll_interval = poll_interval
        self.cart = CartStore(storage)
        self.favorites = FavoritesStore(storage, api, self.tasks, report_error=report_error)
        self.ledger = OrderLedger(storage)
        self.checkout = CheckoutOrchestrator(
            cart=self.cart,
            ledger=self.ledger,
            api=api,
            link_opener=link_opener or WebBrowserOpener(),
            clipboard=clipboard or MemoryClipboard(),
        )

    @classmethod
    def from_env(cls, **overrides) -> "Storefront":
        api_url = os.environ.get("STOREFRONT_API_URL", DEFAULT_API_URL)
        data_dir = os.environ.get("STOREFRONT_DATA_DIR", DEFAULT_DATA_DIR)
        poll_interval = float(os.environ.get("STOREFRONT_POLL_INTERVAL", DEFAULT_POLL_INTERVAL))
        logger.info("Storefront client configured", api_url=api_url, data_dir=data_dir)
        return cls(
            storage=JsonFileStorage(data_dir),
            api=HttpStorefrontApi(api_url),
            poll_interval=poll_interval,
            **overrides,
        )

    def sync_ledger(self) -> dict:
        return push_ledger(self.ledger, self.api)

    def poll_order_status(self, order_id: str, on_update, on_error=None) -> OrderStatusPoller:
        poller = OrderStatusPoller(self.api, order_id, self.poll_interval, on_update, on_error)
        poller.start()
        return poller

    def close(self) -> None:
        self.tasks.shutdown()
