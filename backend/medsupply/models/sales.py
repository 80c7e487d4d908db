from __future__ import annotations

from ..extensions import db
from medsupply.time_utils import to_utc_z, utcnow


class Sale(db.Model):
    """
    A completed sale.

    client_id is a plain reference rather than a foreign key: deleting a
    client must leave its sales in place. total_cents is stored as computed
    at submission and is never recomputed from the lines.

    invoice_number is human-facing and NOT unique.
    """
    __tablename__ = "sales"
    __table_args__ = (
        db.Index("ix_sales_client_id", "client_id"),
        db.Index("ix_sales_invoice_number", "invoice_number"),
        {"sqlite_autoincrement": True},
    )

    MUTABLE_FIELDS = {"client_id", "total_cents", "invoice_number", "created_at"}

    id = db.Column(db.Integer, primary_key=True)

    client_id = db.Column(db.Integer, nullable=False)
    total_cents = db.Column(db.Integer, nullable=False, default=0)
    invoice_number = db.Column(db.String(32), nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    lines = db.relationship(
        "SaleLine",
        backref="sale",
        cascade="all, delete-orphan",
        order_by="SaleLine.position",
        lazy="selectin",
    )

    @classmethod
    def from_document(cls, data: dict) -> "Sale":
        sale = cls()
        sale.apply_patch(data)
        return sale

    def apply_patch(self, patch: dict) -> None:
        for k, v in patch.items():
            if k in self.MUTABLE_FIELDS:
                setattr(self, k, v)
        if "lines" in patch:
            self.lines = [
                SaleLine(
                    position=i,
                    product_id=line["product_id"],
                    quantity=line["quantity"],
                    unit_price_cents=line["unit_price_cents"],
                )
                for i, line in enumerate(patch["lines"])
            ]

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "client_id": self.client_id,
            "lines": [line.to_dict() for line in self.lines],
            "total_cents": self.total_cents,
            "invoice_number": self.invoice_number,
            "created_at": to_utc_z(self.created_at),
        }


class SaleLine(db.Model):
    """
    One product/quantity/price entry within a sale.

    unit_price_cents is the product price at the time of sale.
    """
    __tablename__ = "sale_lines"
    __table_args__ = (
        db.Index("ix_sale_lines_sale_id", "sale_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    sale_id = db.Column(db.Integer, db.ForeignKey("sales.id"), nullable=False)
    position = db.Column(db.Integer, nullable=False, default=0)

    product_id = db.Column(db.Integer, nullable=False)
    quantity = db.Column(db.Integer, nullable=False)
    unit_price_cents = db.Column(db.Integer, nullable=False)

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "quantity": self.quantity,
            "unit_price_cents": self.unit_price_cents,
            "line_total_cents": self.quantity * self.unit_price_cents,
        }
