from __future__ import annotations

from ..extensions import db
from medsupply.time_utils import to_utc_z


COMPANY_SETTINGS_KEY = "company"


class CompanySettings(db.Model):
    """
    Company identity printed on invoices.

    Singleton: exactly one row, keyed by COMPANY_SETTINGS_KEY.
    """
    __tablename__ = "company_settings"

    MUTABLE_FIELDS = {"name", "address", "phone", "email", "logo_url"}

    key = db.Column(db.String(32), primary_key=True)

    name = db.Column(db.String(128), nullable=False)
    address = db.Column(db.String(255), nullable=True)
    phone = db.Column(db.String(32), nullable=True)
    email = db.Column(db.String(255), nullable=True)
    logo_url = db.Column(db.String(512), nullable=True)

    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    @classmethod
    def from_document(cls, data: dict) -> "CompanySettings":
        settings = cls()
        settings.apply_patch(data)
        return settings

    def apply_patch(self, patch: dict) -> None:
        for k, v in patch.items():
            if k in self.MUTABLE_FIELDS:
                setattr(self, k, v)

    def to_dict(self) -> dict:
        return {
            "id": self.key,
            "name": self.name,
            "address": self.address,
            "phone": self.phone,
            "email": self.email,
            "logo_url": self.logo_url,
            "updated_at": to_utc_z(self.updated_at),
        }
