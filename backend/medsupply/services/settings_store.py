# Overview: Store for the company settings singleton and its logo upload.

from __future__ import annotations

from flask import current_app

from ..models import COMPANY_SETTINGS_KEY
from medsupply.time_utils import utcnow
from .blob_storage import BlobStorage, BlobStorageError
from .document_store import DocumentStore, DocumentStoreError

COLLECTION = "settings"

DEFAULT_SETTINGS = {
    "name": "CMJ Med Service",
    "address": "123 Medical Center Drive",
    "phone": "(555) 123-4567",
    "email": "info@cmjmedservice.com",
    "logo_url": "/logo.png",
}

SETTINGS_FIELDS = tuple(DEFAULT_SETTINGS)


class SettingsError(Exception):
    """Raised when settings cannot be saved or the logo cannot be stored."""


class SettingsStore:
    def __init__(self, documents: DocumentStore, blobs: BlobStorage):
        self.documents = documents
        self.blobs = blobs
        self.settings: dict | None = None
        self.loading = False
        self.error: str | None = None

    def _fail(self, message: str, exc: Exception) -> None:
        self.error = message
        current_app.logger.warning("%s: %s", message, exc)

    def fetch(self) -> dict | None:
        """Load the singleton, creating it with defaults on first read."""
        self.loading = True
        self.error = None
        try:
            doc = self.documents.get(COLLECTION, COMPANY_SETTINGS_KEY)
            if doc is None:
                self.documents.set(COLLECTION, COMPANY_SETTINGS_KEY, DEFAULT_SETTINGS)
                doc = {"id": COMPANY_SETTINGS_KEY, **DEFAULT_SETTINGS}
            self.settings = {k: doc.get(k) for k in SETTINGS_FIELDS}
        except DocumentStoreError as exc:
            self._fail("Failed to fetch settings", exc)
        finally:
            self.loading = False
        return self.settings

    def update(self, new_settings: dict) -> dict:
        """Replace the whole settings record."""
        record = {k: new_settings.get(k) for k in SETTINGS_FIELDS}
        self.loading = True
        self.error = None
        try:
            self.documents.set(COLLECTION, COMPANY_SETTINGS_KEY, record)
            self.settings = record
            return record
        except DocumentStoreError as exc:
            self._fail("Failed to update settings", exc)
            raise SettingsError("Failed to update settings") from exc
        finally:
            self.loading = False

    def upload_logo(self, filename: str, data: bytes) -> str:
        millis = int(utcnow().timestamp() * 1000)
        name = f"company/logo-{millis}-{filename}" if filename else f"company/logo-{millis}"
        try:
            return self.blobs.upload(name, data)
        except BlobStorageError as exc:
            current_app.logger.warning("Failed to upload logo: %s", exc)
            raise SettingsError("Failed to upload logo") from exc

    def clear(self) -> None:
        self.settings = None
        self.error = None
        self.loading = False
