from __future__ import annotations

from ..extensions import db
from medsupply.time_utils import to_utc_z


class Product(db.Model):
    """
    A stocked item with its current price and quantity on hand.

    price_cents is the live price; sales copy it into their lines so later
    price changes never alter historical invoices.

    version_id is bumped on every ORM write and by the atomic stock
    decrement, so stale read-modify-write cycles can be detected.
    """
    __tablename__ = "products"
    __table_args__ = (
        db.Index("ix_products_name", "name"),
        db.Index("ix_products_code", "code"),
        {"sqlite_autoincrement": True},
    )

    MUTABLE_FIELDS = {"code", "name", "description", "price_cents", "quantity"}

    id = db.Column(db.Integer, primary_key=True)

    code = db.Column(db.String(64), nullable=False)
    name = db.Column(db.String(128), nullable=False)
    description = db.Column(db.Text, nullable=True)

    price_cents = db.Column(db.Integer, nullable=False, default=0)
    quantity = db.Column(db.Integer, nullable=False, default=0)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())
    version_id = db.Column(db.Integer, nullable=False, default=1)

    __mapper_args__ = {"version_id_col": version_id}

    @classmethod
    def from_document(cls, data: dict) -> "Product":
        product = cls()
        product.apply_patch(data)
        return product

    def apply_patch(self, patch: dict) -> None:
        for k, v in patch.items():
            if k in self.MUTABLE_FIELDS:
                setattr(self, k, v)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "code": self.code,
            "name": self.name,
            "description": self.description,
            "price_cents": self.price_cents,
            "quantity": self.quantity,
            "version_id": self.version_id,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
