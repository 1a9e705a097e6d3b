import pytest
from storefront.models import Product
from storefront.storage import JsonFileStorage
from storefront.tasks import BackgroundTasks


class FakeFavoritesApi:
    """Favorite counter endpoints that can be told to fail."""

    def __init__(self):
        self.counts: dict[str, int] = {}
        self.calls: list[tuple[str, str]] = []
        self.error: Exception | None = None

    def _respond(self, action, product_id, delta):
        self.calls.append((action, product_id))
        if self.error is not None:
            raise self.error
        self.counts[product_id] = max(0, self.counts.get(product_id, 0) + delta)
        return self.counts[product_id]

    def increment_favorite(self, product_id):
        return self._respond("increment", product_id, 1)

    def decrement_favorite(self, product_id):
        return self._respond("decrement", product_id, -1)


@pytest.fixture()
def storage(tmp_path):
    return JsonFileStorage(tmp_path / "data")


@pytest.fixture()
def tasks():
    tasks = BackgroundTasks(max_workers=2)
    yield tasks
    tasks.shutdown()


@pytest.fixture()
def fake_api():
    return FakeFavoritesApi()


@pytest.fixture()
def scarf():
    return Product(id="prod-001", name="Silk Scarf", price=100.0, sku="SCF-001", stock=20, max_order_quantity=5)


@pytest.fixture()
def tote():
    return Product(id="prod-002", name="Cotton Tote", price=250.0, discount_price=199.0, stock=5)
