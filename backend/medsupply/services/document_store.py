# Overview: Service-layer operations for the document store; collection-oriented CRUD over SQLAlchemy.

"""
Document Store

Collection-oriented persistence facade. Callers address records by
collection name and id and exchange plain dicts; the SQLAlchemy models
behind each collection stay an implementation detail.

Every SQLAlchemyError is rolled back and re-raised as DocumentStoreError so
the entity stores have a single backend failure type to handle.
"""
from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator

import sqlalchemy as sa
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models import Client, Product, Sale, CompanySettings

# Upper bound appended to a prefix for range queries
PREFIX_HIGH_SENTINEL = ""

COLLECTIONS = {
    "clients": Client,
    "products": Product,
    "sales": Sale,
    "settings": CompanySettings,
}


class DocumentStoreError(Exception):
    """Raised for any backend persistence failure."""


class DocumentNotFoundError(DocumentStoreError):
    """Raised when an update or delete targets a missing record."""


class StockConflictError(DocumentStoreError):
    """Raised when an atomic decrement would take a value below zero."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


class DocumentStore:
    def __init__(self, collections: dict[str, Any] | None = None):
        self.collections = dict(collections or COLLECTIONS)
        self._in_transaction = False

    def _model(self, collection: str):
        model = self.collections.get(collection)
        if model is None:
            raise DocumentStoreError(f"Unknown collection: {collection}")
        return model

    def _pk_column(self, model):
        return model.__mapper__.primary_key[0]

    @contextmanager
    def _guard(self) -> Iterator[None]:
        try:
            yield
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise DocumentStoreError(str(exc)) from exc

    def _commit(self, commit: bool) -> None:
        if commit and not self._in_transaction:
            db.session.commit()
        else:
            db.session.flush()

    @contextmanager
    def transaction(self) -> Iterator["DocumentStore"]:
        """
        Group writes into one commit. Writes issued inside the block only
        flush; any exception rolls every one of them back.
        """
        self._in_transaction = True
        try:
            yield self
            with self._guard():
                db.session.commit()
        except Exception:
            db.session.rollback()
            raise
        finally:
            self._in_transaction = False

    def insert(self, collection: str, data: dict, *, commit: bool = True):
        model = self._model(collection)
        with self._guard():
            obj = model.from_document(data)
            db.session.add(obj)
            db.session.flush()
            doc_id = self._pk_column(model).name
            new_id = getattr(obj, doc_id)
            self._commit(commit)
            return new_id

    def update(self, collection: str, doc_id, patch: dict, *, commit: bool = True) -> None:
        model = self._model(collection)
        with self._guard():
            obj = db.session.get(model, doc_id)
            if obj is None:
                raise DocumentNotFoundError(f"{collection}/{doc_id} not found")
            obj.apply_patch(patch)
            self._commit(commit)

    def set(self, collection: str, doc_id, data: dict, *, commit: bool = True) -> None:
        """Create or fully replace the record stored under doc_id."""
        model = self._model(collection)
        with self._guard():
            obj = db.session.get(model, doc_id)
            if obj is None:
                obj = model.from_document(data)
                setattr(obj, self._pk_column(model).name, doc_id)
                db.session.add(obj)
            else:
                obj.apply_patch({k: data.get(k) for k in model.MUTABLE_FIELDS})
            self._commit(commit)

    def delete(self, collection: str, doc_id, *, commit: bool = True) -> None:
        model = self._model(collection)
        with self._guard():
            obj = db.session.get(model, doc_id)
            if obj is None:
                raise DocumentNotFoundError(f"{collection}/{doc_id} not found")
            db.session.delete(obj)
            self._commit(commit)

    def get(self, collection: str, doc_id) -> dict | None:
        model = self._model(collection)
        with self._guard():
            obj = db.session.get(model, doc_id)
            return obj.to_dict() if obj is not None else None

    def get_all(self, collection: str) -> list[dict]:
        model = self._model(collection)
        with self._guard():
            rows = db.session.query(model).order_by(self._pk_column(model).asc()).all()
            return [row.to_dict() for row in rows]

    def prefix_query(self, collection: str, field: str, term: str) -> list[dict]:
        """Range query matching records whose field starts with term."""
        model = self._model(collection)
        column = getattr(model, field, None)
        if column is None:
            raise DocumentStoreError(f"Unknown field {field} on {collection}")
        with self._guard():
            rows = (
                db.session.query(model)
                .filter(column >= term, column <= term + PREFIX_HIGH_SENTINEL)
                .order_by(column.asc(), self._pk_column(model).asc())
                .all()
            )
            return [row.to_dict() for row in rows]

    def decrement(self, collection: str, doc_id, field: str, amount: int, *, commit: bool = True) -> None:
        """
        Atomically subtract amount from field, refusing to go below zero.

        Single UPDATE ... WHERE field >= amount; no read-modify-write window.
        """
        model = self._model(collection)
        column = getattr(model, field)
        values = {column: column - amount}
        if hasattr(model, "version_id"):
            values[model.version_id] = model.version_id + 1

        with self._guard():
            result = db.session.execute(
                sa.update(model)
                .where(self._pk_column(model) == doc_id, column >= amount)
                .values(values)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                raise StockConflictError(
                    f"Cannot decrement {collection}/{doc_id}.{field} by {amount}",
                    details={"id": doc_id, "field": field, "requested": amount},
                )
            self._commit(commit)
