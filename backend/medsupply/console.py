# Overview: Application-scoped service container owning the stores, workflow and collaborators.

"""
Console

One Console is built per Flask app in create_app() and stored in
app.extensions; routes and CLI commands reach it through get_console()
instead of module-level globals. close() drops every cache and
subscription at shutdown.

The store caches are shared by all requests served by the app. That
matches a single-user console; several concurrent writers would race on
them (see entity_store.py).
"""
from __future__ import annotations

from flask import Flask, current_app

from .services.auth_service import AuthService
from .services.blob_storage import BlobStorage
from .services.client_store import ClientStore
from .services.document_store import DocumentStore
from .services.inventory_store import InventoryStore
from .services.invoice_service import InvoiceDocument, InvoiceRenderer, build_invoice
from .services.sale_builder import SaleBuilder
from .services.sales_service import SaleWorkflow
from .services.sales_store import SalesStore
from .services.settings_store import SettingsStore

EXTENSION_KEY = "medsupply"


class Console:
    def __init__(
        self,
        *,
        blob_dir: str,
        blob_base_url: str = "/api/blobs/",
        stock_mode: str = "atomic",
        invoice_scheme: str = "random",
        low_stock_threshold: int = 10,
    ):
        self.documents = DocumentStore()
        self.blobs = BlobStorage(blob_dir, blob_base_url)
        self.auth = AuthService()

        self.clients = ClientStore(self.documents)
        self.inventory = InventoryStore(self.documents)
        self.sales = SalesStore(self.documents)
        self.settings = SettingsStore(self.documents, self.blobs)

        self.workflow = SaleWorkflow(
            self.documents,
            self.inventory,
            self.sales,
            stock_mode=stock_mode,
            invoice_scheme=invoice_scheme,
        )
        self.renderer = InvoiceRenderer()
        self.low_stock_threshold = low_stock_threshold

    @classmethod
    def from_config(cls, config) -> "Console":
        return cls(
            blob_dir=config["BLOB_STORAGE_DIR"],
            blob_base_url=config["BLOB_BASE_URL"],
            stock_mode=config["STOCK_DECREMENT_MODE"],
            invoice_scheme=config["INVOICE_NUMBER_SCHEME"],
            low_stock_threshold=config["LOW_STOCK_THRESHOLD"],
        )

    def new_sale(self) -> SaleBuilder:
        """Start a sale against the current inventory snapshot."""
        return SaleBuilder(self.inventory.fetch_all())

    def invoice_for(self, sale: dict) -> InvoiceDocument:
        """Join a sale with fresh client, product and settings data."""
        settings = self.settings.fetch()
        logo = self.blobs.read((settings or {}).get("logo_url"))
        return build_invoice(
            sale,
            self.clients.fetch_all(),
            self.inventory.fetch_all(),
            settings,
            logo=logo,
        )

    def close(self) -> None:
        for store in (self.clients, self.inventory, self.sales, self.settings):
            store.clear()
        self.auth.close()


def init_console(app: Flask) -> Console:
    console = Console.from_config(app.config)
    app.extensions[EXTENSION_KEY] = console
    return console


def get_console() -> Console:
    return current_app.extensions[EXTENSION_KEY]
