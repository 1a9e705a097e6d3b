"""Shopping cart: actions, reducer and store.

Quantities are clamped, never rejected: adding past a product's per-order
cap leaves the line at the cap, and updates stay within ``[1, cap]``.
"""

from dataclasses import dataclass

import structlog

from storefront.errors import ProductOutOfStockError
from storefront.models import CartItem, CartState, Product
from storefront.store import StateStore

logger = structlog.get_logger(__name__)


# ---------------------------------------------------------------------------
# Actions
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class AddItem:
    product: Product
    quantity: int = 1


@dataclass(frozen=True)
class RemoveItem:
    product_id: str


@dataclass(frozen=True)
class RemoveItems:
    product_ids: frozenset[str]


@dataclass(frozen=True)
class UpdateQuantity:
    product_id: str
    quantity: int


@dataclass(frozen=True)
class ClearCart:
    pass


@dataclass(frozen=True)
class LoadCart:
    items: tuple[CartItem, ...]


def _clamp(quantity: int, product: Product) -> int:
    return max(1, min(quantity, product.max_order_quantity))


def cart_reducer(state: CartState, action) -> CartState:
    if isinstance(action, AddItem):
        existing = next((item for item in state.items if item.product.id == action.product.id), None)
        if existing is None:
            line = CartItem(product=action.product, quantity=_clamp(action.quantity, action.product))
            return CartState(items=state.items + (line,))
        quantity = _clamp(existing.quantity + action.quantity, action.product)
        return CartState(
            items=tuple(
                CartItem(product=action.product, quantity=quantity) if item is existing else item
                for item in state.items
            )
        )

    if isinstance(action, RemoveItem):
        return CartState(items=tuple(item for item in state.items if item.product.id != action.product_id))

    if isinstance(action, RemoveItems):
        return CartState(items=tuple(item for item in state.items if item.product.id not in action.product_ids))

    if isinstance(action, UpdateQuantity):
        return CartState(
            items=tuple(
                item.model_copy(update={"quantity": _clamp(action.quantity, item.product)})
                if item.product.id == action.product_id
                else item
                for item in state.items
            )
        )

    if isinstance(action, ClearCart):
        return CartState()

    if isinstance(action, LoadCart):
        return CartState(items=tuple(action.items))

    return state


class CartStore(StateStore):
    storage_key = "cart"

    def __init__(self, storage):
        super().__init__(storage, cart_reducer, CartState())

    def _load_action(self, raw):
        return LoadCart(items=tuple(CartItem.model_validate(item) for item in raw))

    def _encode(self, state: CartState):
        return [item.to_json() for item in state.items]

    # -------------------------------------------------------------------
    # Commands
    # -------------------------------------------------------------------
    def add_to_cart(self, product: Product, quantity: int = 1) -> CartState:
        if product.stock == 0:
            raise ProductOutOfStockError(product.id, product.name)
        return self.dispatch(AddItem(product=product, quantity=quantity))

    def remove_from_cart(self, product_id: str) -> CartState:
        return self.dispatch(RemoveItem(product_id=product_id))

    def update_quantity(self, product_id: str, quantity: int) -> CartState:
        return self.dispatch(UpdateQuantity(product_id=product_id, quantity=quantity))

    def clear_cart(self) -> CartState:
        return self.dispatch(ClearCart())

    def remove_invalid_products(self, product_ids) -> CartState:
        """Drop lines whose products the server no longer knows."""
        logger.info("Removing unavailable products from cart", product_ids=sorted(product_ids))
        return self.dispatch(RemoveItems(product_ids=frozenset(product_ids)))

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    @property
    def items(self) -> tuple[CartItem, ...]:
        return self.state.items

    def item_quantity(self, product_id: str) -> int:
        return next((item.quantity for item in self.state.items if item.product.id == product_id), 0)

    def is_in_cart(self, product_id: str) -> bool:
        return any(item.product.id == product_id for item in self.state.items)

    @property
    def total_items(self) -> int:
        return self.state.total_items

    @property
    def total_amount(self) -> float:
        return self.state.total_amount
