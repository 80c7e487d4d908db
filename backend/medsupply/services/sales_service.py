# Overview: Service-layer operations for sales; stock decrement, invoice numbering and sale persistence.

"""
Sales Service - sale transaction workflow

Turns a SaleBuilder's lines into a persisted sale:
1. decrement stock for every line
2. generate an invoice number
3. write the sale record
4. return the new sale id

Stock modes (Config.STOCK_DECREMENT_MODE):
- "atomic": every decrement is a floor-checked UPDATE and the sale insert
  shares their transaction. An overdraw or any failure rolls back the
  whole sale.
- "legacy": every line reads its quantity from the inventory snapshot taken
  before the sale and writes back snapshot - sold through the store, one
  commit per line. Concurrent sales of the same product, or two lines for
  the same product in one sale, overwrite each other (lost update), and a
  later failure leaves earlier decrements applied.

Invoice schemes (Config.INVOICE_NUMBER_SCHEME):
- "random": INV-YYYYMMDD-NNN (local date) with NNN drawn from 000..999. NOT unique;
  collisions are neither checked nor retried.
- "sequential": INV-YYYYMMDD-NNN with NNN = invoices issued that day + 1.
"""
from __future__ import annotations

import random
import re
from datetime import datetime
from typing import Iterable

from flask import current_app

from medsupply.time_utils import localnow, utcnow
from .document_store import DocumentStore, DocumentStoreError, StockConflictError
from .inventory_store import InventoryStore
from .sale_builder import PendingLine, SaleBuilder
from .sales_store import SalesStore

STOCK_MODE_ATOMIC = "atomic"
STOCK_MODE_LEGACY = "legacy"
STOCK_MODES = {STOCK_MODE_ATOMIC, STOCK_MODE_LEGACY}

INVOICE_SCHEME_RANDOM = "random"
INVOICE_SCHEME_SEQUENTIAL = "sequential"
INVOICE_SCHEMES = {INVOICE_SCHEME_RANDOM, INVOICE_SCHEME_SEQUENTIAL}

INVOICE_NUMBER_RE = re.compile(r"^INV-\d{8}-\d{3}$")

FAILED_TO_CREATE_SALE = "Failed to create sale"


class SaleError(Exception):
    """Raised for sale operation errors."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


def invoice_prefix(now: datetime) -> str:
    return f"INV-{now:%Y%m%d}-"


def generate_invoice_number(now: datetime | None = None, rng: random.Random | None = None) -> str:
    now = now or localnow()
    rng = rng or random
    return f"{invoice_prefix(now)}{rng.randrange(1000):03d}"


def next_sequential_invoice_number(documents: DocumentStore, now: datetime | None = None) -> str:
    now = now or localnow()
    prefix = invoice_prefix(now)
    issued = documents.prefix_query("sales", "invoice_number", prefix)
    return f"{prefix}{len(issued) + 1:03d}"


def _as_pending(line) -> PendingLine:
    if isinstance(line, PendingLine):
        return line
    return PendingLine(
        product_id=line["product_id"],
        quantity=line["quantity"],
        unit_price_cents=line["unit_price_cents"],
    )


class SaleWorkflow:
    def __init__(
        self,
        documents: DocumentStore,
        inventory: InventoryStore,
        sales: SalesStore,
        *,
        stock_mode: str = STOCK_MODE_ATOMIC,
        invoice_scheme: str = INVOICE_SCHEME_RANDOM,
        rng: random.Random | None = None,
    ):
        if stock_mode not in STOCK_MODES:
            raise ValueError(f"Unknown stock decrement mode: {stock_mode}")
        if invoice_scheme not in INVOICE_SCHEMES:
            raise ValueError(f"Unknown invoice number scheme: {invoice_scheme}")
        self.documents = documents
        self.inventory = inventory
        self.sales = sales
        self.stock_mode = stock_mode
        self.invoice_scheme = invoice_scheme
        self.rng = rng

    def submit(self, builder: SaleBuilder) -> int:
        if not builder.can_submit:
            raise SaleError("Select a client and add at least one product")
        return self.create_sale(builder.client_id, builder.lines, builder.total())

    def create_sale(self, client_id: int, lines: Iterable, total_cents: int) -> int:
        pending = [_as_pending(line) for line in lines]
        if not pending:
            raise SaleError("Cannot create a sale with no lines")

        if self.stock_mode == STOCK_MODE_LEGACY:
            sale_id = self._create_legacy(client_id, pending, total_cents)
        else:
            sale_id = self._create_atomic(client_id, pending, total_cents)

        current_app.logger.info(
            "Created sale %s for client %s (%d lines, %d cents)",
            sale_id, client_id, len(pending), total_cents,
        )
        return sale_id

    def _invoice_number(self, now: datetime) -> str:
        if self.invoice_scheme == INVOICE_SCHEME_SEQUENTIAL:
            return next_sequential_invoice_number(self.documents, now)
        return generate_invoice_number(now, self.rng)

    def _sale_document(self, client_id: int, lines: list[PendingLine], total_cents: int) -> dict:
        return {
            "client_id": client_id,
            "lines": [line.to_dict() for line in lines],
            "total_cents": total_cents,
            "invoice_number": self._invoice_number(localnow()),
            "created_at": utcnow(),
        }

    def _create_legacy(self, client_id: int, lines: list[PendingLine], total_cents: int) -> int:
        snapshot = {p["id"]: p for p in self.inventory.items}
        for line in lines:
            product = snapshot.get(line.product_id)
            if product is None:
                raise SaleError(FAILED_TO_CREATE_SALE, details={
                    "product_id": line.product_id,
                    "reason": "Product not found",
                })
            # Read-then-write against the pre-sale snapshot; no version check.
            self.inventory.update(product["id"], {"quantity": product["quantity"] - line.quantity})
            if self.inventory.error:
                raise SaleError(FAILED_TO_CREATE_SALE, details={
                    "product_id": line.product_id,
                    "reason": self.inventory.error,
                })

        try:
            document = self._sale_document(client_id, lines, total_cents)
            return self.sales.add(document)
        except DocumentStoreError as exc:
            raise SaleError(FAILED_TO_CREATE_SALE, details={"reason": str(exc)}) from exc

    def _create_atomic(self, client_id: int, lines: list[PendingLine], total_cents: int) -> int:
        try:
            with self.documents.transaction():
                for line in lines:
                    self.documents.decrement(
                        "products", line.product_id, "quantity", line.quantity, commit=False
                    )
                document = self._sale_document(client_id, lines, total_cents)
                sale_id = self.documents.insert("sales", document, commit=False)
        except StockConflictError as exc:
            raise SaleError(FAILED_TO_CREATE_SALE, details={
                "product_id": exc.details.get("id"),
                "reason": "Insufficient stock",
            }) from exc
        except DocumentStoreError as exc:
            raise SaleError(FAILED_TO_CREATE_SALE, details={"reason": str(exc)}) from exc

        self.inventory.invalidate()
        self.sales.invalidate()
        return sale_id
