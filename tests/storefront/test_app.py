"""Tests for the storefront client wiring."""

from storefront.api import HttpStorefrontApi
from storefront.app import Storefront
from storefront.checkout import MemoryClipboard


class TestStorefront:
    def test_from_env(self, tmp_path, monkeypatch):
        monkeypatch.setenv("STOREFRONT_API_URL", "http://shop.test/api/")
        monkeypatch.setenv("STOREFRONT_DATA_DIR", str(tmp_path / "client"))
        monkeypatch.setenv("STOREFRONT_POLL_INTERVAL", "5")

        storefront = Storefront.from_env()
        try:
            assert isinstance(storefront.api, HttpStorefrontApi)
            assert storefront.api.base_url == "http://shop.test/api"
            assert storefront.poll_interval == 5.0
            assert (tmp_path / "client").is_dir()
        finally:
            storefront.close()

    def test_stores_share_storage(self, storage, fake_api, scarf):
        storefront = Storefront(storage, fake_api, clipboard=MemoryClipboard())
        try:
            storefront.cart.add_to_cart(scarf)
            storefront.favorites.add_to_favorites(scarf).result(timeout=5)

            assert set(storage.get("cart")[0]) == {"product", "quantity"}
            assert storage.get("favorites")[0]["product"]["id"] == "prod-001"
        finally:
            storefront.close()

    def test_sync_ledger_with_empty_ledger(self, storage, fake_api):
        storefront = Storefront(storage, fake_api)
        try:
            assert storefront.sync_ledger() == {"syncedCount": 0, "errorCount": 0}
        finally:
            storefront.close()
