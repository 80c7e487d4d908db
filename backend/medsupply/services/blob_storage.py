# Overview: Service-layer operations for blob storage; named uploads with durable retrieval URLs.

from __future__ import annotations

from pathlib import Path


class BlobStorageError(Exception):
    """Raised when a blob cannot be written or its name is unsafe."""


class BlobStorage:
    """
    Filesystem-backed object storage.

    Blobs live under root_dir; their public URL is base_url + name and is
    served by the blobs blueprint.
    """

    def __init__(self, root_dir: str | Path, base_url: str = "/api/blobs/"):
        self.root_dir = Path(root_dir)
        self.base_url = base_url if base_url.endswith("/") else base_url + "/"

    def _path_for(self, name: str) -> Path:
        name = name.strip().lstrip("/")
        if not name:
            raise BlobStorageError("Blob name is required")
        root = self.root_dir.resolve()
        path = (root / name).resolve()
        if root != path and root not in path.parents:
            raise BlobStorageError(f"Invalid blob name: {name}")
        return path

    def upload(self, name: str, data: bytes) -> str:
        """Store data under name and return its retrieval URL."""
        path = self._path_for(name)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as exc:
            raise BlobStorageError(f"Failed to store blob {name}") from exc
        return self.base_url + name.strip().lstrip("/")

    def resolve(self, url: str | None) -> Path | None:
        """Map a URL issued by upload() back to its file, if it exists."""
        if not url or not url.startswith(self.base_url):
            return None
        try:
            path = self._path_for(url[len(self.base_url):])
        except BlobStorageError:
            return None
        return path if path.is_file() else None

    def read(self, url: str | None) -> bytes | None:
        path = self.resolve(url)
        if path is None:
            return None
        return path.read_bytes()
