"""Repository for the Order aggregate."""

from ordering.domain import ordering
from ordering.order.order import Order

# Orders scanned per query while applying a free-text search
SEARCH_BATCH = 100


def search_text(order: Order) -> str:
    """Lower-cased identity, customer name and phone, and item names."""
    parts = [order.order_id, order.customer_info.name, order.customer_info.phone]
    parts.extend(item.name for item in order.items)
    return " ".join(part for part in parts if part).lower()


@ordering.repository(part_of=Order)
class OrderRepository:
    """Order repository with the admin listing queries.

    The base repository provides ``get`` and ``add``.
    """

    def find_page(self, status=None, created_from=None, created_to=None, page=1, limit=20, search=None):
        """Return one page of orders, newest first, and the number of matches.

        ``search`` matches case-insensitively against ``search_text``. It is
        applied after the stored filters, so the scan covers every order the
        other criteria let through.
        """
        criteria = {}
        if status:
            criteria["status"] = status
        if created_from:
            criteria["created_at__gte"] = created_from
        if created_to:
            criteria["created_at__lte"] = created_to

        query = self._dao.query.filter(**criteria) if criteria else self._dao.query
        query = query.order_by("-created_at")

        needle = (search or "").strip().lower()
        if needle:
            matches = self._scan(query, needle)
            start = (page - 1) * limit
            return matches[start : start + limit], len(matches)

        results = query.offset((page - 1) * limit).limit(limit).all()
        return results.items, results.total

    def _scan(self, query, needle):
        matches, offset = [], 0
        while True:
            batch = query.offset(offset).limit(SEARCH_BATCH).all()
            matches.extend(order for order in batch.items if needle in search_text(order))
            offset += SEARCH_BATCH
            if offset >= batch.total:
                return matches
