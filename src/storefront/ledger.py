"""Client-held order ledger.

Every order the customer places is kept locally, newest last, so order
history works offline and can be replayed to the server with ``push_ledger``.
"""

import threading

import structlog
from pydantic import ValidationError

from storefront.models import LedgerEntry, OrderSnapshot

logger = structlog.get_logger(__name__)

LEDGER_KEY = "customer_orders"


class OrderLedger:
    def __init__(self, storage):
        self._storage = storage
        self._lock = threading.Lock()

    def _load(self) -> list[LedgerEntry]:
        raw = self._storage.get(LEDGER_KEY, [])
        if not isinstance(raw, list):
            logger.warning("Discarding malformed order ledger")
            return []
        entries = []
        for item in raw:
            try:
                entries.append(LedgerEntry.model_validate(item))
            except ValidationError as e:
                logger.warning("Skipping unreadable ledger entry", error=str(e))
        return entries

    def _save(self, entries: list[LedgerEntry]) -> None:
        self._storage.set(LEDGER_KEY, [entry.to_json() for entry in entries])

    def entries(self) -> list[LedgerEntry]:
        with self._lock:
            return self._load()

    def append(self, order: OrderSnapshot, notification_link: str | None = None) -> bool:
        """Record ``order``. Returns False when it is already in the ledger."""
        with self._lock:
            entries = self._load()
            if any(entry.order.order_id == order.order_id for entry in entries):
                return False
            entries.append(LedgerEntry(order=order, notification_link=notification_link))
            self._save(entries)
        logger.info("Order added to ledger", order_id=order.order_id)
        return True

    def find(self, order_id: str) -> LedgerEntry | None:
        return next((entry for entry in self.entries() if entry.order.order_id == order_id), None)

    def remove(self, order_id: str) -> bool:
        with self._lock:
            entries = self._load()
            kept = [entry for entry in entries if entry.order.order_id != order_id]
            if len(kept) == len(entries):
                return False
            self._save(kept)
        return True

    def clear(self) -> None:
        with self._lock:
            self._storage.remove(LEDGER_KEY)

    def history(self, search: str | None = None, status: str | None = None) -> list[LedgerEntry]:
        """Entries newest first, optionally narrowed by status and a search term.

        The term matches the order id, customer name, phone or any item name,
        case-insensitively.
        """
        results = list(reversed(self.entries()))
        if status:
            results = [entry for entry in results if entry.order.status == status]
        if search:
            term = search.strip().lower()
            results = [entry for entry in results if term in _haystack(entry.order)]
        return results

    def envelopes(self) -> list[dict]:
        return [entry.envelope() for entry in self.entries()]


def _haystack(order: OrderSnapshot) -> str:
    parts = [order.order_id, order.customer_info.name, order.customer_info.phone]
    parts.extend(item.name for item in order.items)
    return " ".join(parts).lower()


def push_ledger(ledger: OrderLedger, api) -> dict:
    """Replay every ledger entry through the sync endpoint and return its summary."""
    envelopes = ledger.envelopes()
    if not envelopes:
        return {"syncedCount": 0, "errorCount": 0}
    summary = api.sync_orders(envelopes)
    logger.info(
        "Order ledger pushed",
        orders=len(envelopes),
        synced=summary.get("syncedCount"),
        errors=summary.get("errorCount"),
    )
    return summary
