"""Errors surfaced by the storefront client."""


class StorefrontError(Exception):
    """Base class for client-side errors."""


class ApiError(StorefrontError):
    """The ordering API rejected a request or could not be reached.

    ``status_code`` is None when no response was received.
    """

    def __init__(self, message, status_code=None, payload=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload or {}


class OrderNotFound(ApiError):
    pass


class ProductUnavailable(ApiError):
    """Order placement referenced a product the catalogue no longer has."""

    def __init__(self, product_id, product_name=None, message=None, payload=None):
        self.product_id = product_id
        self.product_name = product_name or "Unknown product"
        super().__init__(message or f"Product {self.product_name} is no longer available", 404, payload)


class EmptyCartError(StorefrontError):
    def __init__(self):
        super().__init__("Your cart is empty")


class StaleCartItemError(StorefrontError):
    """Checkout failed because one cart line points at a deleted product.

    The line has already been removed from the cart; retrying checks out the
    remaining items.
    """

    def __init__(self, product_id, product_name):
        self.product_id = product_id
        self.product_name = product_name
        super().__init__(
            f'Product "{product_name}" is no longer available and was removed from your cart. '
            "Please review your cart and try again."
        )


class ProductOutOfStockError(StorefrontError):
    def __init__(self, product_id, product_name):
        self.product_id = product_id
        self.product_name = product_name
        super().__init__(f"{product_name} is out of stock")


class TransientClientError(StorefrontError):
    """A local side effect (opening a link) was blocked; a fallback applies."""
