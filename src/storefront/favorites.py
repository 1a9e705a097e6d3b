"""Favorites with optimistic counter updates.

The local list changes immediately; the server-side favorite counter is
updated in the background. When that call fails only the affected product is
rolled back, so concurrent toggles of other products are never undone.
"""

from concurrent.futures import Future
from dataclasses import dataclass
from datetime import UTC, datetime

import structlog

from storefront.models import FavoriteItem, FavoritesState, Product
from storefront.store import StateStore

logger = structlog.get_logger(__name__)


# ---------------------------------------------------------------------------
# Actions
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class AddFavorite:
    item: FavoriteItem


@dataclass(frozen=True)
class RemoveFavorite:
    product_id: str


@dataclass(frozen=True)
class RestoreFavorite:
    """Put one product back the way it was before an optimistic change."""

    product_id: str
    snapshot: FavoriteItem | None


@dataclass(frozen=True)
class UpdateFavoriteCount:
    product_id: str
    favorite_count: int


@dataclass(frozen=True)
class ClearFavorites:
    pass


@dataclass(frozen=True)
class LoadFavorites:
    items: tuple[FavoriteItem, ...]


@dataclass(frozen=True)
class SetError:
    error: str | None


def _without(items, product_id):
    return tuple(item for item in items if item.product.id != product_id)


def favorites_reducer(state: FavoritesState, action) -> FavoritesState:
    if isinstance(action, AddFavorite):
        if any(item.product.id == action.item.product.id for item in state.items):
            return state
        return state.model_copy(update={"items": state.items + (action.item,), "error": None})

    if isinstance(action, RemoveFavorite):
        return state.model_copy(update={"items": _without(state.items, action.product_id), "error": None})

    if isinstance(action, RestoreFavorite):
        items = _without(state.items, action.product_id)
        if action.snapshot is not None:
            items = items + (action.snapshot,)
        return state.model_copy(update={"items": items})

    if isinstance(action, UpdateFavoriteCount):
        items = tuple(
            item.model_copy(
                update={"product": item.product.model_copy(update={"favorite_count": action.favorite_count})}
            )
            if item.product.id == action.product_id
            else item
            for item in state.items
        )
        return state.model_copy(update={"items": items})

    if isinstance(action, ClearFavorites):
        return FavoritesState()

    if isinstance(action, LoadFavorites):
        return FavoritesState(items=tuple(action.items))

    if isinstance(action, SetError):
        return state.model_copy(update={"error": action.error})

    return state


def _resolved(value) -> Future:
    future = Future()
    future.set_result(value)
    return future


class FavoritesStore(StateStore):
    storage_key = "favorites"

    def __init__(self, storage, api, tasks, report_error=None):
        self._api = api
        self._tasks = tasks
        self._report_error = report_error
        super().__init__(storage, favorites_reducer, FavoritesState())

    def _load_action(self, raw):
        return LoadFavorites(items=tuple(FavoriteItem.model_validate(item) for item in raw))

    def _encode(self, state: FavoritesState):
        # The error is transient and never persisted.
        return [item.to_json() for item in state.items]

    def _find(self, product_id: str) -> FavoriteItem | None:
        return next((item for item in self.state.items if item.product.id == product_id), None)

    # -------------------------------------------------------------------
    # Commands
    # -------------------------------------------------------------------
    def add_to_favorites(self, product: Product) -> Future:
        """Favorite ``product`` now and bump its counter in the background.

        The returned future resolves to True when the server accepted the
        change and False when it was rolled back.
        """
        with self._lock:
            if self._find(product.id) is not None:
                self.dispatch(SetError(error=f"{product.name} is already in your favorites"))
                return _resolved(False)

            optimistic = product.model_copy(update={"favorite_count": product.favorite_count + 1})
            self.dispatch(AddFavorite(item=FavoriteItem(product=optimistic, added_at=datetime.now(UTC))))
        return self._tasks.submit(self._sync, product.id, None, self._api.increment_favorite)

    def remove_from_favorites(self, product_id: str) -> Future:
        with self._lock:
            snapshot = self._find(product_id)
            if snapshot is None:
                return _resolved(False)

            self.dispatch(RemoveFavorite(product_id=product_id))
        return self._tasks.submit(self._sync, product_id, snapshot, self._api.decrement_favorite)

    def _sync(self, product_id: str, snapshot: FavoriteItem | None, call) -> bool:
        try:
            count = call(product_id)
        except Exception as exc:
            logger.warning("Favorite update failed, rolling back", product_id=product_id, error=str(exc))
            self.dispatch(RestoreFavorite(product_id=product_id, snapshot=snapshot))
            self.dispatch(SetError(error=str(exc)))
            if self._report_error is not None:
                self._report_error(exc)
            return False

        if snapshot is None:
            self.dispatch(UpdateFavoriteCount(product_id=product_id, favorite_count=count))
        return True

    def clear_favorites(self) -> FavoritesState:
        return self.dispatch(ClearFavorites())

    def clear_error(self) -> FavoritesState:
        return self.dispatch(SetError(error=None))

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    @property
    def items(self) -> tuple[FavoriteItem, ...]:
        return self.state.items

    @property
    def error(self) -> str | None:
        return self.state.error

    def is_favorite(self, product_id: str) -> bool:
        return self._find(product_id) is not None

    @property
    def count(self) -> int:
        return len(self.state.items)
