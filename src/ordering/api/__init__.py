"""Ordering domain API package."""

from ordering.api.app import create_app
from ordering.api.routes import order_router, product_router

__all__ = ["create_app", "order_router", "product_router"]
