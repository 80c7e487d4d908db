from __future__ import annotations

from ..extensions import db
from medsupply.time_utils import to_utc_z


class Client(db.Model):
    """
    A customer of the business (clinic, practice, individual buyer).

    No uniqueness is enforced on any field. Deleting a client does not
    touch the sales that reference it; see Sale.client_id.
    """
    __tablename__ = "clients"
    __table_args__ = (
        db.Index("ix_clients_name", "name"),
        {"sqlite_autoincrement": True},
    )

    MUTABLE_FIELDS = {"name", "phone", "email", "address"}

    id = db.Column(db.Integer, primary_key=True)

    name = db.Column(db.String(128), nullable=False)
    phone = db.Column(db.String(32), nullable=True)
    email = db.Column(db.String(255), nullable=True)
    address = db.Column(db.String(255), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    @classmethod
    def from_document(cls, data: dict) -> "Client":
        client = cls()
        client.apply_patch(data)
        return client

    def apply_patch(self, patch: dict) -> None:
        for k, v in patch.items():
            if k in self.MUTABLE_FIELDS:
                setattr(self, k, v)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "phone": self.phone,
            "email": self.email,
            "address": self.address,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
