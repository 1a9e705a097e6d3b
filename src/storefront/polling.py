"""Order status polling for the order-confirmation screen."""

import re
import threading

import structlog

from storefront.errors import ApiError, OrderNotFound

logger = structlog.get_logger(__name__)

ORDER_ID_RE = re.compile(r"^ORD-\d{8}-\d{4}$")


class OrderStatusPoller:
    """Re-fetch one order's public status every ``interval`` seconds.

    ``on_update`` receives each fetched ``OrderSnapshot``. Errors go to
    ``on_error``; polling continues after them except for a 404, which means
    the order will never appear and stops the poller.
    """

    def __init__(self, api, order_id: str, interval: float, on_update, on_error=None):
        self.api = api
        self.order_id = order_id
        self.interval = interval
        self.on_update = on_update
        self.on_error = on_error
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    def poll_once(self) -> bool:
        """Fetch once. Returns False when polling should stop."""
        try:
            snapshot = self.api.order_status(self.order_id)
        except OrderNotFound as e:
            logger.info("Polled order not found, stopping", order_id=self.order_id)
            self._report(e)
            return False
        except ApiError as e:
            logger.warning("Order status poll failed", order_id=self.order_id, error=e.message)
            self._report(e)
            return True
        self.on_update(snapshot)
        return True

    def _report(self, error: Exception) -> None:
        if self.on_error is not None:
            self.on_error(error)

    def _run(self) -> None:
        while not self._stop.is_set():
            if not self.poll_once():
                self._stop.set()
                break
            self._stop.wait(self.interval)

    def start(self) -> bool:
        if not ORDER_ID_RE.match(self.order_id or ""):
            logger.info("Not polling malformed order id", order_id=self.order_id)
            return False
        if self.running:
            return True
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name=f"poll-{self.order_id}", daemon=True)
        self._thread.start()
        return True

    def stop(self, timeout: float | None = None) -> None:
        self._stop.set()
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout)

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()
