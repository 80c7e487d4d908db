# Overview: Service-layer base class for entity stores; cached collection lists with loading/error status.

"""
Entity Store

Each store wraps CRUD against one document-store collection and keeps a
transient, non-authoritative copy of that collection in `items`.

Cache policy: after every successful write the store asks its CachePolicy
what to do with the cache. The default, RefetchCachePolicy, re-reads the
whole collection so server-assigned fields are always present.

Failure policy: backend errors never escape. They are logged, converted to
the store's static message for the operation and left in `error`. Stores
that set RAISE_ON_WRITE re-raise from add/update after recording the error.

CONCURRENCY: calls are neither queued nor debounced and share one `loading`
flag. Overlapping calls race and the last fetch to finish wins `items`.
Safe for a single-user console; not for multiple concurrent writers.
"""
from __future__ import annotations

from dataclasses import dataclass

from flask import current_app

from .document_store import DocumentStore, DocumentStoreError


@dataclass(frozen=True)
class StoreMessages:
    fetch: str
    add: str
    update: str
    delete: str
    search: str


class CachePolicy:
    """Decides how a store's cache catches up with a write it just made."""

    def after_write(self, store: "EntityStore", *, op: str, doc_id=None) -> None:
        raise NotImplementedError


class RefetchCachePolicy(CachePolicy):
    """Discard the cache and reload the full collection."""

    def after_write(self, store: "EntityStore", *, op: str, doc_id=None) -> None:
        store.fetch_all()


class EntityStore:
    COLLECTION: str = ""
    SEARCH_FIELD: str = "name"
    MESSAGES: StoreMessages
    RAISE_ON_WRITE = False

    def __init__(self, documents: DocumentStore, cache_policy: CachePolicy | None = None):
        self.documents = documents
        self.cache_policy = cache_policy or RefetchCachePolicy()
        self.items: list[dict] = []
        self.loading = False
        self.error: str | None = None

    def _begin(self) -> None:
        self.loading = True
        self.error = None

    def _fail(self, message: str, exc: Exception) -> None:
        self.error = message
        current_app.logger.warning("%s: %s", message, exc)

    def fetch_all(self) -> list[dict]:
        self._begin()
        try:
            self.items = self.documents.get_all(self.COLLECTION)
        except DocumentStoreError as exc:
            self._fail(self.MESSAGES.fetch, exc)
        finally:
            self.loading = False
        return self.items

    def add(self, data: dict):
        self._begin()
        try:
            new_id = self.documents.insert(self.COLLECTION, data)
            self.cache_policy.after_write(self, op="add", doc_id=new_id)
            return new_id
        except DocumentStoreError as exc:
            self._fail(self.MESSAGES.add, exc)
            if self.RAISE_ON_WRITE:
                raise
            return None
        finally:
            self.loading = False

    def update(self, doc_id, patch: dict) -> None:
        self._begin()
        try:
            self.documents.update(self.COLLECTION, doc_id, patch)
            self.cache_policy.after_write(self, op="update", doc_id=doc_id)
        except DocumentStoreError as exc:
            self._fail(self.MESSAGES.update, exc)
            if self.RAISE_ON_WRITE:
                raise
        finally:
            self.loading = False

    def delete(self, doc_id) -> None:
        self._begin()
        try:
            self.documents.delete(self.COLLECTION, doc_id)
            self.cache_policy.after_write(self, op="delete", doc_id=doc_id)
        except DocumentStoreError as exc:
            self._fail(self.MESSAGES.delete, exc)
        finally:
            self.loading = False

    def search(self, term: str | None) -> list[dict]:
        if not term or not term.strip():
            return self.fetch_all()
        self._begin()
        try:
            self.items = self.documents.prefix_query(self.COLLECTION, self.SEARCH_FIELD, term)
        except DocumentStoreError as exc:
            self._fail(self.MESSAGES.search, exc)
        finally:
            self.loading = False
        return self.items

    def invalidate(self) -> None:
        """Apply the cache policy for a write made outside this store."""
        self.cache_policy.after_write(self, op="external")

    def find(self, doc_id) -> dict | None:
        for item in self.items:
            if item.get("id") == doc_id:
                return item
        return None

    def clear(self) -> None:
        self.items = []
        self.error = None
        self.loading = False
