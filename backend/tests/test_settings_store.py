"""
Company settings and blob storage tests.
"""

import pytest

from medsupply.services.blob_storage import BlobStorage, BlobStorageError
from medsupply.services.document_store import DocumentStoreError
from medsupply.services.settings_store import DEFAULT_SETTINGS, SettingsError


def _broken(*args, **kwargs):
    raise DocumentStoreError("backend unavailable")


class TestSettingsStore:
    def test_first_fetch_creates_defaults(self, console):
        settings = console.settings.fetch()

        assert settings == DEFAULT_SETTINGS
        assert console.documents.get("settings", "company")["name"] == "CMJ Med Service"

    def test_fetch_is_stable(self, console):
        console.settings.fetch()
        console.settings.update({**DEFAULT_SETTINGS, "name": "Acme Medical"})

        assert console.settings.fetch()["name"] == "Acme Medical"
        assert len(console.documents.get_all("settings")) == 1

    def test_update_replaces_whole_record(self, console):
        console.settings.fetch()

        saved = console.settings.update({"name": "Acme Medical", "phone": "555-0000"})

        assert saved["address"] is None
        assert saved["logo_url"] is None
        assert console.settings.fetch() == saved

    def test_update_failure_raises_settings_error(self, console, monkeypatch):
        monkeypatch.setattr(console.documents, "set", _broken)

        with pytest.raises(SettingsError, match="Failed to update settings"):
            console.settings.update({"name": "Acme Medical"})
        assert console.settings.error == "Failed to update settings"

    def test_fetch_failure_is_recorded(self, console, monkeypatch):
        monkeypatch.setattr(console.documents, "get", _broken)

        assert console.settings.fetch() is None
        assert console.settings.error == "Failed to fetch settings"

    def test_upload_logo_returns_readable_url(self, console):
        url = console.settings.upload_logo("logo.png", b"\x89PNG data")

        assert url.startswith("/api/blobs/company/logo-")
        assert url.endswith("-logo.png")
        assert console.blobs.read(url) == b"\x89PNG data"

    def test_upload_failure_raises_settings_error(self, console, monkeypatch):
        def refuse(name, data):
            raise BlobStorageError("disk full")

        monkeypatch.setattr(console.blobs, "upload", refuse)

        with pytest.raises(SettingsError, match="Failed to upload logo"):
            console.settings.upload_logo("logo.png", b"x")


class TestBlobStorage:
    def test_round_trip(self, tmp_path):
        blobs = BlobStorage(tmp_path, "/files")

        url = blobs.upload("a/b.txt", b"hello")

        assert url == "/files/a/b.txt"
        assert blobs.resolve(url) == (tmp_path / "a" / "b.txt").resolve()
        assert blobs.read(url) == b"hello"

    def test_unknown_urls_resolve_to_none(self, tmp_path):
        blobs = BlobStorage(tmp_path)

        assert blobs.read("/logo.png") is None
        assert blobs.read("/api/blobs/missing.png") is None
        assert blobs.read(None) is None

    @pytest.mark.parametrize("name", ["../escape.txt", "a/../../escape.txt", "", "   "])
    def test_rejects_unsafe_names(self, tmp_path, name):
        blobs = BlobStorage(tmp_path / "root")

        with pytest.raises(BlobStorageError):
            blobs.upload(name, b"x")
        assert not (tmp_path / "escape.txt").exists()
