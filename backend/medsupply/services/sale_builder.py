# Overview: In-memory accumulator for a sale in progress.

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable


@dataclass(frozen=True)
class PendingLine:
    product_id: int
    quantity: int
    unit_price_cents: int

    @property
    def line_total_cents(self) -> int:
        return self.quantity * self.unit_price_cents

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "quantity": self.quantity,
            "unit_price_cents": self.unit_price_cents,
        }


class SaleBuilder:
    """
    Lines for a sale that has not been submitted yet.

    Quantities are checked against the product snapshot the builder was
    given (the inventory store's last fetch), not against live stock.
    Invalid additions are dropped without raising.
    """

    def __init__(self, products: Iterable[dict] = ()):
        self.client_id: int | None = None
        self.lines: list[PendingLine] = []
        self.refresh_products(products)

    def refresh_products(self, products: Iterable[dict]) -> None:
        self._products = {p["id"]: p for p in products}

    def select_client(self, client_id: int | None) -> None:
        self.client_id = client_id

    def add_line(self, product_id, quantity) -> bool:
        if isinstance(quantity, bool) or not isinstance(quantity, int):
            return False
        product = self._products.get(product_id)
        if product is None or quantity <= 0 or quantity > product["quantity"]:
            return False

        self.lines.append(
            PendingLine(
                product_id=product["id"],
                quantity=quantity,
                unit_price_cents=product["price_cents"],
            )
        )
        return True

    def remove_line(self, index: int) -> bool:
        if index < 0 or index >= len(self.lines):
            return False
        del self.lines[index]
        return True

    def total(self) -> int:
        return sum(line.line_total_cents for line in self.lines)

    @property
    def can_submit(self) -> bool:
        return self.client_id is not None and len(self.lines) > 0
