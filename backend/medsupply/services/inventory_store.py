# Overview: Entity store for the products collection.

from __future__ import annotations

from .entity_store import EntityStore, StoreMessages


class InventoryStore(EntityStore):
    COLLECTION = "products"
    SEARCH_FIELD = "name"
    MESSAGES = StoreMessages(
        fetch="Failed to fetch products",
        add="Failed to add product",
        update="Failed to update product",
        delete="Failed to delete product",
        search="Failed to search products",
    )

    def in_stock(self) -> list[dict]:
        return [p for p in self.items if p["quantity"] > 0]

    def low_stock(self, threshold: int) -> list[dict]:
        return [p for p in self.items if p["quantity"] < threshold]
