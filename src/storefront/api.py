"""HTTP client for the ordering API.

Any object with a requests-style ``request`` method works as the session,
which lets tests drive a FastAPI ``TestClient`` directly.
"""

import requests
import structlog

from storefront.errors import ApiError, OrderNotFound, ProductUnavailable
from storefront.models import CartItem, CustomerDetails, OrderSnapshot

logger = structlog.get_logger(__name__)


def _error_message(payload: dict, default: str) -> str:
    error = payload.get("error")
    if isinstance(error, str):
        return error
    if isinstance(error, dict):
        return "; ".join(f"{field}: {', '.join(map(str, msgs))}" for field, msgs in error.items())
    return default


class HttpStorefrontApi:
    def __init__(self, base_url: str, session=None, timeout: float = 10):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    def _request(self, method: str, path: str, **kwargs) -> dict:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            logger.warning("Ordering API unreachable", method=method, path=path, error=str(e))
            raise ApiError(f"Could not reach the ordering service: {e}") from e

        try:
            payload = response.json()
        except ValueError:
            payload = {}

        if response.status_code >= 400:
            message = _error_message(payload, f"Request failed with status {response.status_code}")
            logger.info("Ordering API rejected request", method=method, path=path, status=response.status_code)
            if response.status_code == 404 and payload.get("productId"):
                raise ProductUnavailable(
                    payload["productId"], payload.get("productName"), message=message, payload=payload
                )
            raise ApiError(message, status_code=response.status_code, payload=payload)
        return payload

    # -------------------------------------------------------------------
    # Orders
    # -------------------------------------------------------------------
    def create_order(self, customer: CustomerDetails, items: tuple[CartItem, ...]) -> tuple[OrderSnapshot, str | None]:
        body = {
            "customerInfo": customer.to_json(),
            "items": [
                {"productId": item.product.id, "quantity": item.quantity, "name": item.product.name} for item in items
            ],
        }
        payload = self._request("POST", "/orders", json=body)
        return OrderSnapshot.model_validate(payload["order"]), payload.get("notificationLink")

    def sync_orders(self, envelopes: list[dict]) -> dict:
        return self._request("POST", "/orders/sync", json={"orders": envelopes})

    def order_status(self, order_id: str) -> OrderSnapshot:
        try:
            payload = self._request("GET", f"/orders/{order_id}/status")
        except ApiError as e:
            if e.status_code == 404:
                raise OrderNotFound(e.message, status_code=404, payload=e.payload) from e
            raise
        return OrderSnapshot.model_validate(payload)

    # -------------------------------------------------------------------
    # Favorites
    # -------------------------------------------------------------------
    def increment_favorite(self, product_id: str) -> int:
        return self._request("POST", f"/products/{product_id}/favorite")["favoriteCount"]

    def decrement_favorite(self, product_id: str) -> int:
        return self._request("DELETE", f"/products/{product_id}/favorite")["favoriteCount"]
