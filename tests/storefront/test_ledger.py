"""Tests for the client-held order ledger."""

import pytest
from storefront.ledger import OrderLedger, push_ledger
from storefront.models import CustomerDetails, OrderLine, OrderSnapshot


def _order(order_id, name="Asha Rao", status="pending", item="Silk Scarf"):
    return OrderSnapshot(
        order_id=order_id,
        customer_info=CustomerDetails(name=name, phone="+919812345678", address="12 MG Road, Bengaluru"),
        items=(OrderLine(product_id="prod-001", name=item, price=100.0, quantity=1),),
        total_amount=100.0,
        status=status,
    )


@pytest.fixture()
def ledger(storage):
    return OrderLedger(storage)


class TestOrderLedger:
    def test_append_is_idempotent(self, ledger):
        assert ledger.append(_order("ORD-20261019-0001"), "https://wa.me/1?text=a") is True
        assert ledger.append(_order("ORD-20261019-0001")) is False
        assert len(ledger.entries()) == 1

    def test_find_and_remove(self, ledger):
        ledger.append(_order("ORD-20261019-0001"))
        assert ledger.find("ORD-20261019-0001").order.customer_info.name == "Asha Rao"
        assert ledger.remove("ORD-20261019-0001") is True
        assert ledger.remove("ORD-20261019-0001") is False
        assert ledger.find("ORD-20261019-0001") is None

    def test_reads_entries_saved_with_whatsapp_link(self, ledger, storage):
        storage.set(
            "customer_orders",
            [{"order": _order("ORD-20261019-0001").to_json(), "whatsappLink": "https://wa.me/1?text=b"}],
        )

        entry = ledger.find("ORD-20261019-0001")

        assert entry.notification_link == "https://wa.me/1?text=b"
        assert ledger.envelopes()[0]["notificationLink"] == "https://wa.me/1?text=b"

    def test_clear(self, ledger):
        ledger.append(_order("ORD-20261019-0001"))
        ledger.clear()
        assert ledger.entries() == []

    def test_persisted_as_json_array(self, ledger, storage):
        ledger.append(_order("ORD-20261019-0001"), "https://wa.me/1?text=a")
        stored = storage.get("customer_orders")
        assert stored[0]["order"]["orderId"] == "ORD-20261019-0001"
        assert stored[0]["notificationLink"] == "https://wa.me/1?text=a"

    def test_malformed_document_reads_as_empty(self, ledger, storage):
        storage.set("customer_orders", {"not": "a list"})
        assert ledger.entries() == []


class TestHistory:
    @pytest.fixture(autouse=True)
    def _orders(self, ledger):
        ledger.append(_order("ORD-20261017-0001", name="Asha Rao", item="Silk Scarf"))
        ledger.append(_order("ORD-20261018-0001", name="Ravi Kumar", status="delivered", item="Brass Lamp"))
        ledger.append(_order("ORD-20261019-0001", name="Meera Iyer", item="Cotton Tote"))

    def test_newest_first(self, ledger):
        assert [entry.order.order_id for entry in ledger.history()] == [
            "ORD-20261019-0001",
            "ORD-20261018-0001",
            "ORD-20261017-0001",
        ]

    def test_search_by_customer(self, ledger):
        assert [entry.order.order_id for entry in ledger.history(search="ravi")] == ["ORD-20261018-0001"]

    def test_search_by_item(self, ledger):
        assert [entry.order.order_id for entry in ledger.history(search="TOTE")] == ["ORD-20261019-0001"]

    def test_search_by_order_id(self, ledger):
        assert len(ledger.history(search="20261017")) == 1

    def test_filter_by_status(self, ledger):
        assert [entry.order.status for entry in ledger.history(status="delivered")] == ["delivered"]


class TestPushLedger:
    def test_envelopes_carry_the_link(self, ledger):
        ledger.append(_order("ORD-20261019-0001"), "https://wa.me/1?text=a")
        envelope = ledger.envelopes()[0]
        assert envelope["orderId"] == "ORD-20261019-0001"
        assert envelope["notificationLink"] == "https://wa.me/1?text=a"
        assert envelope["items"][0]["productId"] == "prod-001"

    def test_empty_ledger_makes_no_call(self, ledger):
        class NoCallsApi:
            def sync_orders(self, envelopes):
                raise AssertionError("should not be called")

        assert push_ledger(ledger, NoCallsApi()) == {"syncedCount": 0, "errorCount": 0}

    def test_pushes_every_entry(self, ledger):
        sent = []

        class RecordingApi:
            def sync_orders(self, envelopes):
                sent.extend(envelopes)
                return {"syncedCount": len(envelopes), "errorCount": 0}

        ledger.append(_order("ORD-20261019-0001"))
        ledger.append(_order("ORD-20261019-0002"))

        assert push_ledger(ledger, RecordingApi())["syncedCount"] == 2
        assert [envelope["orderId"] for envelope in sent] == ["ORD-20261019-0001", "ORD-20261019-0002"]
