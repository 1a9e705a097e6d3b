"""Domain errors raised by the ordering context beyond Protean's own exceptions.

``ValidationError`` and ``ObjectNotFoundError`` come from ``protean.exceptions``;
the errors below cover conflicts and stale catalogue references.
"""


class ConflictError(Exception):
    """An operation collides with the current state of an order.

    Raised for illegal status transitions and for identity collisions.
    """

    def __init__(self, message, order_id=None):
        super().__init__(message)
        self.message = message
        self.order_id = order_id


class ProductUnavailableError(Exception):
    """A product referenced by an order line no longer exists in the catalogue."""

    def __init__(self, product_id, product_name=None):
        self.product_id = str(product_id)
        self.product_name = product_name or "Unknown product"
        super().__init__(f"Product {self.product_name} is no longer available")
        self.message = str(self)
