"""Client-side snapshots of products, cart lines, favorites and orders.

All models are immutable; reducers build new instances instead of mutating.
They read and write the API's camelCase JSON.
"""

from datetime import datetime

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ClientModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True, extra="ignore")

    def to_json(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class Product(ClientModel):
    id: str
    name: str
    price: float = Field(ge=0)
    discount_price: float | None = None
    images: tuple[str, ...] = ()
    sku: str | None = None
    stock: int = 0
    max_order_quantity: int = Field(default=10, ge=1)
    is_active: bool = True
    favorite_count: int = 0

    @property
    def unit_price(self) -> float:
        return self.discount_price or self.price


class CartItem(ClientModel):
    product: Product
    quantity: int = Field(ge=1)

    @property
    def line_total(self) -> float:
        return self.product.unit_price * self.quantity


class FavoriteItem(ClientModel):
    product: Product
    added_at: datetime


class CartState(ClientModel):
    items: tuple[CartItem, ...] = ()

    @property
    def total_items(self) -> int:
        return sum(item.quantity for item in self.items)

    @property
    def total_amount(self) -> float:
        return round(sum(item.line_total for item in self.items), 2)


class FavoritesState(ClientModel):
    items: tuple[FavoriteItem, ...] = ()
    error: str | None = None


# ---------------------------------------------------------------------------
# Orders as the client sees them
# ---------------------------------------------------------------------------
class CustomerDetails(ClientModel):
    name: str
    phone: str
    address: str
    email: str | None = None


class OrderLine(ClientModel):
    product_id: str
    name: str
    price: float
    quantity: int
    image: str | None = None
    sku: str | None = None


class OrderSnapshot(ClientModel):
    order_id: str
    customer_info: CustomerDetails
    items: tuple[OrderLine, ...] = ()
    total_amount: float = 0.0
    status: str = "pending"
    confirmed_at: datetime | None = None
    processing_at: datetime | None = None
    shipped_at: datetime | None = None
    delivered_at: datetime | None = None
    cancelled_at: datetime | None = None
    cancellation_reason: str | None = None
    notification_link: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class LedgerEntry(ClientModel):
    order: OrderSnapshot
    notification_link: str | None = Field(
        None, validation_alias=AliasChoices("notificationLink", "whatsappLink", "notification_link")
    )

    def envelope(self) -> dict:
        """The entry as the sync endpoint expects it: the order plus its link."""
        data = self.order.to_json()
        data["notificationLink"] = self.notification_link or self.order.notification_link
        return data
