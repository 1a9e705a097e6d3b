"""Catalogue port: the product facts ordering needs from the catalogue.

Product management lives outside this service. Ordering only looks products
up to price order lines and keeps the favorite counters current.
"""

from abc import ABC, abstractmethod


class CataloguePort(ABC):
    """Abstract interface for catalogue adapters."""

    @abstractmethod
    def get_product(self, product_id: str) -> dict | None:
        """Look up a product.

        Returns:
            dict with keys: id, name, price, discount_price, images, sku, stock,
            max_order_quantity, is_active, favorite_count; or None when the
            product does not exist.
        """
        ...

    @abstractmethod
    def adjust_stock(self, product_id: str, delta: int) -> int | None:
        """Add ``delta`` (possibly negative) to the product's stock.

        Returns:
            The new stock level, or None when the product does not exist.
        """
        ...

    @abstractmethod
    def increment_favorites(self, product_id: str) -> int | None:
        """Add one to the product's favorite counter.

        Returns:
            The new count, or None when the product does not exist.
        """
        ...

    @abstractmethod
    def decrement_favorites(self, product_id: str) -> int | None:
        """Subtract one from the product's favorite counter, never below zero.

        Returns:
            The new count, or None when the product does not exist.
        """
        ...
