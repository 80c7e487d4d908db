# Overview: Entity store for the sales collection, plus client-name joins used by list views.

from __future__ import annotations

from .document_store import DocumentStoreError
from .entity_store import EntityStore, StoreMessages

UNKNOWN_CLIENT = "Unknown Client"


class SalesStore(EntityStore):
    """
    Sales are written by the sale workflow, which must know when a step
    failed, so add/update re-raise after recording the error.
    """
    COLLECTION = "sales"
    SEARCH_FIELD = "invoice_number"
    RAISE_ON_WRITE = True
    MESSAGES = StoreMessages(
        fetch="Failed to fetch sales",
        add="Failed to add sale",
        update="Failed to update sale",
        delete="Failed to delete sale",
        search="Failed to search sales",
    )

    def get(self, sale_id) -> dict | None:
        try:
            return self.documents.get(self.COLLECTION, sale_id)
        except DocumentStoreError as exc:
            self._fail("Failed to fetch sale", exc)
            return None

    def for_client(self, client_id) -> list[dict]:
        return [s for s in self.items if s["client_id"] == client_id]

    def with_client_names(self, clients: list[dict], sales: list[dict] | None = None) -> list[dict]:
        names = {c["id"]: c["name"] for c in clients}
        return [
            {**sale, "client_name": names.get(sale["client_id"], UNKNOWN_CLIENT)}
            for sale in (self.items if sales is None else sales)
        ]

    def filter(self, term: str | None, clients: list[dict]) -> list[dict]:
        """Case-insensitive match on invoice number or client name."""
        annotated = self.with_client_names(clients)
        if not term:
            return annotated
        needle = term.lower()
        names = {c["id"] for c in clients}
        return [
            sale for sale in annotated
            if needle in sale["invoice_number"].lower()
            or (sale["client_id"] in names and needle in sale["client_name"].lower())
        ]
