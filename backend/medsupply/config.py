# backend/medsupply/config.py
from __future__ import annotations
import os


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/medsupply.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///medsupply.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Blob storage (company logo uploads)
    BLOB_STORAGE_DIR = os.environ.get("BLOB_STORAGE_DIR", "instance/blobs")
    BLOB_BASE_URL = os.environ.get("BLOB_BASE_URL", "/api/blobs/")

    # "atomic" decrements stock inside one transaction with a floor check.
    # "legacy" reads cached stock and writes it back line by line.
    STOCK_DECREMENT_MODE = os.environ.get("STOCK_DECREMENT_MODE", "atomic")

    # "random" (INV-YYYYMMDD-000..999) or "sequential" (per-day counter)
    INVOICE_NUMBER_SCHEME = os.environ.get("INVOICE_NUMBER_SCHEME", "random")

    LOW_STOCK_THRESHOLD = int(os.environ.get("LOW_STOCK_THRESHOLD", "10"))

    CORS_ALLOWED_ORIGINS = [
        origin.strip()
        for origin in os.environ.get(
            "CORS_ALLOWED_ORIGINS",
            "http://localhost:5173,http://127.0.0.1:5173",
        ).split(",")
        if origin.strip()
    ]
