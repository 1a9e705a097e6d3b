"""Favorite counters kept on catalogue products."""

import structlog
from protean.exceptions import ObjectNotFoundError

from ordering.catalogue import get_catalogue

logger = structlog.get_logger(__name__)


def _adjust(product_id: str, increment: bool) -> int:
    catalogue = get_catalogue()
    count = catalogue.increment_favorites(product_id) if increment else catalogue.decrement_favorites(product_id)
    if count is None:
        raise ObjectNotFoundError(f"Product {product_id} not found")
    logger.debug("Favorite count changed", product_id=product_id, favorite_count=count)
    return count


def add_favorite(product_id: str) -> int:
    return _adjust(product_id, increment=True)


def remove_favorite(product_id: str) -> int:
    """Decrement the counter; it never drops below zero."""
    return _adjust(product_id, increment=False)
