"""
Entity store tests.

Verifies:
- Writes refresh the cached collection (re-fetch after write)
- Backend failures are recorded as static messages, never raised
- Sales store joins and filters
- Cache policy is pluggable
"""

import pytest

from medsupply.services.document_store import DocumentStoreError
from medsupply.services.entity_store import CachePolicy
from medsupply.services.client_store import ClientStore
from medsupply.services.sales_store import SalesStore


def _broken(*args, **kwargs):
    raise DocumentStoreError("backend unavailable")


# =============================================================================
# CLIENT STORE
# =============================================================================


class TestClientStore:
    def test_add_returns_id_and_refreshes_items(self, console):
        store = console.clients
        new_id = store.add({"name": "Alice"})

        assert new_id is not None
        assert [c["name"] for c in store.items] == ["Alice"]
        # server-assigned fields are present after the re-fetch
        assert store.find(new_id)["created_at"] is not None
        assert store.error is None
        assert store.loading is False

    def test_update_and_delete(self, console, alice):
        store = console.clients
        store.update(alice["id"], {"phone": "555-0199"})
        assert store.find(alice["id"])["phone"] == "555-0199"

        store.delete(alice["id"])
        assert store.find(alice["id"]) is None
        assert store.items == []

    def test_search_prefix(self, console):
        store = console.clients
        for name in ("Alice", "Albert", "Bob"):
            store.add({"name": name})

        assert [c["name"] for c in store.search("Al")] == ["Albert", "Alice"]

    def test_blank_search_falls_back_to_fetch_all(self, console):
        store = console.clients
        for name in ("Alice", "Bob"):
            store.add({"name": name})

        assert len(store.search("   ")) == 2
        assert len(store.search(None)) == 2

    @pytest.mark.parametrize(
        "operation,method,args,message",
        [
            ("fetch", "get_all", (), "Failed to fetch clients"),
            ("add", "insert", ({"name": "Alice"},), "Failed to add client"),
            ("update", "update", (1, {"name": "Alice"}), "Failed to update client"),
            ("delete", "delete", (1,), "Failed to delete client"),
            ("search", "prefix_query", ("Al",), "Failed to search clients"),
        ],
    )
    def test_failures_are_recorded_not_raised(self, console, monkeypatch, operation, method, args, message):
        store = console.clients
        monkeypatch.setattr(store.documents, method, _broken)

        call = {
            "fetch": store.fetch_all,
            "add": store.add,
            "update": store.update,
            "delete": store.delete,
            "search": store.search,
        }[operation]
        call(*args)

        assert store.error == message
        assert store.loading is False

    def test_failed_add_returns_none(self, console, monkeypatch):
        store = console.clients
        monkeypatch.setattr(store.documents, "insert", _broken)

        assert store.add({"name": "Alice"}) is None

    def test_next_call_clears_error(self, console, monkeypatch):
        store = console.clients
        monkeypatch.setattr(store.documents, "get_all", _broken)
        store.fetch_all()
        assert store.error == "Failed to fetch clients"

        monkeypatch.undo()
        store.fetch_all()
        assert store.error is None


# =============================================================================
# INVENTORY STORE
# =============================================================================


class TestInventoryStore:
    def test_stock_views(self, console, gauze):
        store = console.inventory
        store.add({"code": "GL-001", "name": "Gloves", "price_cents": 900, "quantity": 0})
        store.add({"code": "SY-001", "name": "Syringe", "price_cents": 50, "quantity": 9})

        assert [p["name"] for p in store.in_stock()] == ["Gauze", "Syringe"]
        assert [p["name"] for p in store.low_stock(10)] == ["Gloves", "Syringe"]

    def test_failure_message_names_products(self, console, monkeypatch):
        store = console.inventory
        monkeypatch.setattr(store.documents, "insert", _broken)

        store.add({"code": "X", "name": "X", "price_cents": 1, "quantity": 1})
        assert store.error == "Failed to add product"


# =============================================================================
# SALES STORE
# =============================================================================


def _sale(console, client_id, invoice_number, total_cents=100):
    return console.documents.insert("sales", {
        "client_id": client_id,
        "total_cents": total_cents,
        "invoice_number": invoice_number,
        "lines": [],
    })


class TestSalesStore:
    def test_write_failures_are_raised_after_recording(self, console, monkeypatch):
        store = console.sales
        monkeypatch.setattr(store.documents, "insert", _broken)

        with pytest.raises(DocumentStoreError):
            store.add({"client_id": 1})
        assert store.error == "Failed to add sale"

    def test_get_single_sale(self, console, alice):
        sale_id = _sale(console, alice["id"], "INV-20261019-001")

        assert console.sales.get(sale_id)["invoice_number"] == "INV-20261019-001"
        assert console.sales.get(999) is None

    def test_get_failure_is_recorded(self, console, monkeypatch):
        monkeypatch.setattr(console.documents, "get", _broken)

        assert console.sales.get(1) is None
        assert console.sales.error == "Failed to fetch sale"

    def test_client_names_fall_back_for_deleted_clients(self, console, alice):
        _sale(console, alice["id"], "INV-20261019-001")
        _sale(console, 999, "INV-20261019-002")
        console.sales.fetch_all()

        names = [s["client_name"] for s in console.sales.with_client_names(console.clients.items)]
        assert names == ["Alice", "Unknown Client"]

    def test_for_client(self, console, alice):
        _sale(console, alice["id"], "INV-20261019-001")
        _sale(console, 999, "INV-20261019-002")
        console.sales.fetch_all()

        assert [s["invoice_number"] for s in console.sales.for_client(alice["id"])] == ["INV-20261019-001"]

    def test_filter_matches_invoice_or_client_name(self, console, alice):
        bob_id = console.clients.add({"name": "Bob"})
        _sale(console, alice["id"], "INV-20261019-001")
        _sale(console, bob_id, "INV-20261020-002")
        _sale(console, 999, "INV-20261021-003")
        console.sales.fetch_all()
        clients = console.clients.items

        assert [s["invoice_number"] for s in console.sales.filter("alice", clients)] == ["INV-20261019-001"]
        assert [s["invoice_number"] for s in console.sales.filter("1020", clients)] == ["INV-20261020-002"]
        # fallback label is not searchable
        assert console.sales.filter("unknown", clients) == []
        assert len(console.sales.filter("", clients)) == 3

    def test_search_by_invoice_prefix(self, console, alice):
        _sale(console, alice["id"], "INV-20261019-001")
        _sale(console, alice["id"], "INV-20261020-001")

        found = console.sales.search("INV-20261019")
        assert [s["invoice_number"] for s in found] == ["INV-20261019-001"]


# =============================================================================
# CACHE POLICY
# =============================================================================


class RecordingPolicy(CachePolicy):
    def __init__(self):
        self.calls = []

    def after_write(self, store, *, op, doc_id=None):
        self.calls.append((op, doc_id))


class TestCachePolicy:
    def test_policy_replaces_refetch(self, console):
        policy = RecordingPolicy()
        store = ClientStore(console.documents, cache_policy=policy)

        new_id = store.add({"name": "Alice"})
        store.update(new_id, {"name": "Alicia"})
        store.delete(new_id)

        assert policy.calls == [("add", new_id), ("update", new_id), ("delete", new_id)]
        # nothing re-read the collection
        assert store.items == []

    def test_invalidate_uses_policy(self, console):
        policy = RecordingPolicy()
        store = SalesStore(console.documents, cache_policy=policy)

        store.invalidate()

        assert policy.calls == [("external", None)]
