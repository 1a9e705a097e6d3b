"""FastAPI routes for the Ordering domain: orders, ledger sync and favorites."""

from datetime import datetime

from fastapi import APIRouter, Query

from ordering.api.schemas import (
    CancelOrderRequest,
    CreateOrderRequest,
    CreateOrderResponse,
    FavoriteCountResponse,
    OrderListResponse,
    OrderSchema,
    OrderStatusView,
    PaginationSchema,
    StatusChangeResponse,
    SyncErrorSchema,
    SyncOrdersRequest,
    SyncSummaryResponse,
    UpdateStatusRequest,
    order_schema,
    order_status_view,
)
from ordering.catalogue.favorites import add_favorite, remove_favorite
from ordering.order.creation import place_order
from ordering.order.queries import find_order, list_orders
from ordering.order.status import cancel_order, change_order_status
from ordering.order.sync import sync_batch

# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201, response_model=CreateOrderResponse)
async def create_order(body: CreateOrderRequest) -> CreateOrderResponse:
    order = place_order(
        customer_info=body.customer_info.model_dump(),
        items=[item.model_dump() for item in body.items],
    )
    return CreateOrderResponse(order=order_schema(order), notification_link=order.notification_link)


@order_router.get("", response_model=OrderListResponse)
async def get_orders(
    status: str | None = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    start_date: datetime | None = Query(None, alias="startDate"),
    end_date: datetime | None = Query(None, alias="endDate"),
    search: str | None = Query(None, max_length=100),
) -> OrderListResponse:
    orders, pagination = list_orders(
        status=status,
        page=page,
        limit=limit,
        created_from=start_date,
        created_to=end_date,
        search=search,
    )
    return OrderListResponse(
        orders=[order_schema(order) for order in orders],
        pagination=PaginationSchema(**pagination),
    )


@order_router.post("/sync", response_model=SyncSummaryResponse, response_model_exclude_none=True)
async def sync_orders(body: SyncOrdersRequest) -> SyncSummaryResponse:
    summary = sync_batch(body.orders)
    return SyncSummaryResponse(
        synced_count=summary.synced_count,
        error_count=summary.error_count,
        errors=[SyncErrorSchema(**error) for error in summary.errors] or None,
    )


@order_router.get("/{order_id}", response_model=OrderSchema)
async def get_order(order_id: str) -> OrderSchema:
    return order_schema(find_order(order_id))


@order_router.get("/{order_id}/status", response_model=OrderStatusView)
async def get_order_status(order_id: str) -> OrderStatusView:
    return order_status_view(find_order(order_id))


@order_router.patch("/{order_id}/status", response_model=StatusChangeResponse)
async def update_order_status(order_id: str, body: UpdateStatusRequest) -> StatusChangeResponse:
    find_order(order_id)
    change = change_order_status(order_id, status=body.status, reason=body.reason)
    return StatusChangeResponse(order=order_schema(change.order), confirmation_message=change.message)


@order_router.patch("/{order_id}/cancel", response_model=StatusChangeResponse)
async def cancel(order_id: str, body: CancelOrderRequest) -> StatusChangeResponse:
    find_order(order_id)
    change = cancel_order(order_id, reason=body.reason)
    return StatusChangeResponse(order=order_schema(change.order), confirmation_message=change.message)


# ---------------------------------------------------------------------------
# Product Router
# ---------------------------------------------------------------------------
product_router = APIRouter(prefix="/products", tags=["products"])


@product_router.post("/{product_id}/favorite", response_model=FavoriteCountResponse)
async def favorite_product(product_id: str) -> FavoriteCountResponse:
    return FavoriteCountResponse(product_id=product_id, favorite_count=add_favorite(product_id))


@product_router.delete("/{product_id}/favorite", response_model=FavoriteCountResponse)
async def unfavorite_product(product_id: str) -> FavoriteCountResponse:
    return FavoriteCountResponse(product_id=product_id, favorite_count=remove_favorite(product_id))
