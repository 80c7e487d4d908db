"""
Document store tests.

Verifies:
- Collection CRUD with plain dicts
- Prefix range queries
- Floor-checked atomic decrement
- Grouped writes roll back together
"""

import pytest

from medsupply.services.document_store import (
    DocumentNotFoundError,
    DocumentStoreError,
    StockConflictError,
)


# =============================================================================
# CRUD
# =============================================================================


class TestCrud:
    def test_insert_assigns_id_and_get_returns_dict(self, console):
        documents = console.documents
        new_id = documents.insert("clients", {"name": "Alice", "phone": "555-0100"})

        doc = documents.get("clients", new_id)
        assert doc["id"] == new_id
        assert doc["name"] == "Alice"
        assert doc["phone"] == "555-0100"
        assert doc["email"] is None

    def test_get_missing_returns_none(self, console):
        assert console.documents.get("clients", 999) is None

    def test_get_all_is_ordered_by_id(self, console):
        documents = console.documents
        ids = [documents.insert("clients", {"name": n}) for n in ("Carol", "Alice", "Bob")]

        assert [d["id"] for d in documents.get_all("clients")] == ids

    def test_update_patches_only_given_fields(self, console):
        documents = console.documents
        new_id = documents.insert("clients", {"name": "Alice", "phone": "555-0100"})

        documents.update("clients", new_id, {"phone": "555-0199"})

        doc = documents.get("clients", new_id)
        assert doc["name"] == "Alice"
        assert doc["phone"] == "555-0199"

    def test_update_missing_raises(self, console):
        with pytest.raises(DocumentNotFoundError):
            console.documents.update("clients", 42, {"name": "Nobody"})

    def test_delete_removes_record(self, console):
        documents = console.documents
        new_id = documents.insert("clients", {"name": "Alice"})

        documents.delete("clients", new_id)

        assert documents.get("clients", new_id) is None

    def test_delete_missing_raises(self, console):
        with pytest.raises(DocumentNotFoundError):
            console.documents.delete("clients", 42)

    def test_set_creates_then_replaces(self, console):
        documents = console.documents
        documents.set("settings", "company", {"name": "First", "phone": "1"})
        documents.set("settings", "company", {"name": "Second"})

        doc = documents.get("settings", "company")
        assert doc["id"] == "company"
        assert doc["name"] == "Second"
        assert doc["phone"] is None

    def test_unknown_collection_raises(self, console):
        with pytest.raises(DocumentStoreError):
            console.documents.get_all("invoices")

    def test_constraint_violation_becomes_store_error(self, console):
        # name is NOT NULL
        with pytest.raises(DocumentStoreError):
            console.documents.insert("clients", {"phone": "555-0100"})

        # session is usable again after the rollback
        assert console.documents.get_all("clients") == []

    def test_sale_lines_keep_order(self, console):
        new_id = console.documents.insert("sales", {
            "client_id": 1,
            "total_cents": 700,
            "invoice_number": "INV-20261019-001",
            "lines": [
                {"product_id": 3, "quantity": 1, "unit_price_cents": 500},
                {"product_id": 1, "quantity": 2, "unit_price_cents": 100},
            ],
        })

        sale = console.documents.get("sales", new_id)
        assert [line["product_id"] for line in sale["lines"]] == [3, 1]
        assert sale["lines"][1]["line_total_cents"] == 200


# =============================================================================
# PREFIX QUERY
# =============================================================================


class TestPrefixQuery:
    def test_matches_prefix_only(self, console):
        documents = console.documents
        for name in ("Gauze", "Gauze Pads", "Gloves", "Bandage"):
            documents.insert("products", {"code": name[:3], "name": name, "price_cents": 100, "quantity": 1})

        names = [d["name"] for d in documents.prefix_query("products", "name", "Ga")]
        assert names == ["Gauze", "Gauze Pads"]

    def test_is_case_sensitive(self, console):
        console.documents.insert("clients", {"name": "Alice"})

        assert console.documents.prefix_query("clients", "name", "al") == []
        assert len(console.documents.prefix_query("clients", "name", "Al")) == 1

    def test_unknown_field_raises(self, console):
        with pytest.raises(DocumentStoreError):
            console.documents.prefix_query("clients", "nickname", "A")


# =============================================================================
# ATOMIC DECREMENT / TRANSACTIONS
# =============================================================================


class TestDecrement:
    def test_decrements_and_bumps_version(self, console, gauze):
        console.documents.decrement("products", gauze["id"], "quantity", 5)

        product = console.documents.get("products", gauze["id"])
        assert product["quantity"] == 45
        assert product["version_id"] == gauze["version_id"] + 1

    def test_can_reach_zero(self, console, gauze):
        console.documents.decrement("products", gauze["id"], "quantity", 50)

        assert console.documents.get("products", gauze["id"])["quantity"] == 0

    def test_refuses_to_go_negative(self, console, gauze):
        with pytest.raises(StockConflictError) as excinfo:
            console.documents.decrement("products", gauze["id"], "quantity", 51)

        assert excinfo.value.details["id"] == gauze["id"]
        assert console.documents.get("products", gauze["id"])["quantity"] == 50

    def test_missing_record_is_a_conflict(self, console):
        with pytest.raises(StockConflictError):
            console.documents.decrement("products", 999, "quantity", 1)


class TestTransaction:
    def test_commits_all_writes(self, console, gauze):
        documents = console.documents
        with documents.transaction():
            documents.decrement("products", gauze["id"], "quantity", 5, commit=False)
            documents.insert("clients", {"name": "Alice"}, commit=False)

        assert documents.get("products", gauze["id"])["quantity"] == 45
        assert len(documents.get_all("clients")) == 1

    def test_failure_rolls_back_earlier_writes(self, console, gauze):
        documents = console.documents
        with pytest.raises(StockConflictError):
            with documents.transaction():
                documents.insert("clients", {"name": "Alice"}, commit=False)
                documents.decrement("products", gauze["id"], "quantity", 5, commit=False)
                documents.decrement("products", gauze["id"], "quantity", 100, commit=False)

        assert documents.get("products", gauze["id"])["quantity"] == 50
        assert documents.get_all("clients") == []
