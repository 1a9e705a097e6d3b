"""In-memory catalogue adapter: product lookups for development and tests."""

import threading

from ordering.catalogue.port import CataloguePort

DEFAULT_MAX_ORDER_QUANTITY = 10


class InMemoryCatalogue(CataloguePort):
    """Catalogue held in a dict, seeded through ``add_product``."""

    def __init__(self):
        self._products: dict[str, dict] = {}
        self._lock = threading.Lock()

    def add_product(
        self,
        product_id: str,
        name: str,
        price: float,
        discount_price: float | None = None,
        images: list[str] | None = None,
        sku: str | None = None,
        stock: int = 100,
        max_order_quantity: int = DEFAULT_MAX_ORDER_QUANTITY,
        is_active: bool = True,
        favorite_count: int = 0,
    ) -> dict:
        product = {
            "id": str(product_id),
            "name": name,
            "price": price,
            "discount_price": discount_price,
            "images": list(images or []),
            "sku": sku,
            "stock": stock,
            "max_order_quantity": max_order_quantity,
            "is_active": is_active,
            "favorite_count": favorite_count,
        }
        with self._lock:
            self._products[product["id"]] = product
        return dict(product)

    def remove_product(self, product_id: str) -> None:
        with self._lock:
            self._products.pop(str(product_id), None)

    def get_product(self, product_id: str) -> dict | None:
        with self._lock:
            product = self._products.get(str(product_id))
            return dict(product) if product else None

    def adjust_stock(self, product_id: str, delta: int) -> int | None:
        with self._lock:
            product = self._products.get(str(product_id))
            if product is None:
                return None
            product["stock"] = max(0, product["stock"] + delta)
            return product["stock"]

    def _adjust_favorites(self, product_id: str, delta: int) -> int | None:
        with self._lock:
            product = self._products.get(str(product_id))
            if product is None:
                return None
            product["favorite_count"] = max(0, product["favorite_count"] + delta)
            return product["favorite_count"]

    def increment_favorites(self, product_id: str) -> int | None:
        return self._adjust_favorites(product_id, 1)

    def decrement_favorites(self, product_id: str) -> int | None:
        return self._adjust_favorites(product_id, -1)

    def reset(self):
        """Forget every product (useful between tests)."""
        with self._lock:
            self._products.clear()
