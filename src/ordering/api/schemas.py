"""Pydantic request/response schemas for the Ordering API.

These are external contracts (anti-corruption layer), separate from
internal Protean commands. The wire format is camelCase; Python attributes
stay snake_case.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class CustomerInfoSchema(CamelModel):
    name: str
    phone: str
    address: str
    email: str | None = None


class OrderItemSchema(CamelModel):
    product_id: str
    name: str
    price: float
    quantity: int
    image: str | None = None
    sku: str | None = None


class PaginationSchema(BaseModel):
    current: int
    pages: int
    total: int
    limit: int


# ---------------------------------------------------------------------------
# Request Schemas
# ---------------------------------------------------------------------------
class OrderLineRequest(CamelModel):
    product_id: str
    quantity: int = Field(ge=1)
    name: str | None = None


class CreateOrderRequest(CamelModel):
    customer_info: CustomerInfoSchema
    items: list[OrderLineRequest]

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {
                    "customerInfo": {
                        "name": "Asha Rao",
                        "phone": "+919812345678",
                        "address": "12 MG Road, Bengaluru 560001",
                        "email": "asha@example.com",
                    },
                    "items": [{"productId": "prod-001", "quantity": 2, "name": "Silk Scarf"}],
                }
            ]
        },
    )


class UpdateStatusRequest(CamelModel):
    status: str
    reason: str | None = None


class CancelOrderRequest(CamelModel):
    reason: str


class SyncOrdersRequest(CamelModel):
    # Envelopes are validated one by one so a bad envelope fails alone
    orders: list[Any]


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class OrderSchema(CamelModel):
    order_id: str
    customer_info: CustomerInfoSchema
    items: list[OrderItemSchema]
    total_amount: float
    status: str
    confirmed_at: datetime | None = None
    processing_at: datetime | None = None
    shipped_at: datetime | None = None
    delivered_at: datetime | None = None
    cancelled_at: datetime | None = None
    cancellation_reason: str | None = None
    notification_link: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class OrderStatusView(CamelModel):
    """Public, read-only view used by customers polling their order."""

    order_id: str
    customer_info: CustomerInfoSchema
    items: list[OrderItemSchema]
    total_amount: float
    status: str
    confirmed_at: datetime | None = None
    processing_at: datetime | None = None
    shipped_at: datetime | None = None
    delivered_at: datetime | None = None
    cancelled_at: datetime | None = None
    cancellation_reason: str | None = None
    created_at: datetime | None = None


class CreateOrderResponse(CamelModel):
    order: OrderSchema
    notification_link: str | None = None


class OrderListResponse(CamelModel):
    orders: list[OrderSchema]
    pagination: PaginationSchema


class StatusChangeResponse(CamelModel):
    order: OrderSchema
    confirmation_message: str


class SyncErrorSchema(CamelModel):
    order_id: str | None = None
    error: str


class SyncSummaryResponse(CamelModel):
    synced_count: int
    error_count: int
    errors: list[SyncErrorSchema] | None = None


class FavoriteCountResponse(CamelModel):
    product_id: str
    favorite_count: int


# ---------------------------------------------------------------------------
# Converters
# ---------------------------------------------------------------------------
def _order_fields(order) -> dict:
    return {
        "order_id": order.order_id,
        "customer_info": CustomerInfoSchema(**order.customer_info.to_context()),
        "items": [OrderItemSchema(**item.to_context()) for item in order.items],
        "total_amount": order.total_amount,
        "status": order.status,
        "confirmed_at": order.confirmed_at,
        "processing_at": order.processing_at,
        "shipped_at": order.shipped_at,
        "delivered_at": order.delivered_at,
        "cancelled_at": order.cancelled_at,
        "cancellation_reason": order.cancellation_reason,
        "created_at": order.created_at,
    }


def order_schema(order) -> OrderSchema:
    return OrderSchema(
        **_order_fields(order),
        notification_link=order.notification_link,
        updated_at=order.updated_at,
    )


def order_status_view(order) -> OrderStatusView:
    return OrderStatusView(**_order_fields(order))
