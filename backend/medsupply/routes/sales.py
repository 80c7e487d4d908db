# Overview: Flask API routes for sales operations; parses input and returns JSON responses.

# backend/medsupply/routes/sales.py
"""Sales API routes: listing, sale creation and invoice download."""

import io

from flask import Blueprint, request, jsonify, send_file, current_app

from . import store_error
from ..console import get_console
from ..services.sales_service import SaleError
from ..validation import parse_sale_request, ValidationError
from ..decorators import require_auth


sales_bp = Blueprint("sales", __name__, url_prefix="/api/sales")


@sales_bp.get("")
@require_auth
def list_sales_route():
    """
    List sales with client names.

    Query params:
    - q: str (optional) - matches invoice number or client name
    """
    console = get_console()
    console.sales.fetch_all()
    if console.sales.error:
        return store_error(console.sales)
    clients = console.clients.fetch_all()

    items = console.sales.filter(request.args.get("q"), clients)
    return jsonify({"items": items, "count": len(items)}), 200


@sales_bp.post("")
@require_auth
def create_sale_route():
    """
    Create a sale.

    Body: {"client_id": int, "items": [{"product_id": int, "quantity": int}, ...]}

    Items are offered to the sale builder against the current inventory;
    items it refuses (non-positive quantity, unknown product, more than in
    stock) are left out and their indexes returned as rejected_items.
    """
    try:
        client_id, requested = parse_sale_request(request.get_json(silent=True))
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    console = get_console()
    try:
        builder = console.new_sale()
        if console.inventory.error:
            return store_error(console.inventory)

        console.clients.fetch_all()
        if client_id is not None and console.clients.find(client_id) is None:
            return jsonify({"error": "Client not found"}), 400
        builder.select_client(client_id)

        rejected = [
            index for index, (product_id, quantity) in enumerate(requested)
            if not builder.add_line(product_id, quantity)
        ]

        sale_id = console.workflow.submit(builder)
        sale = console.sales.get(sale_id)
        return jsonify({"sale": sale, "rejected_items": rejected}), 201

    except SaleError as e:
        return jsonify({"error": str(e), "details": e.details}), 400
    except Exception:
        current_app.logger.exception("Failed to create sale")
        return jsonify({"error": "Internal server error"}), 500


@sales_bp.get("/<int:sale_id>")
@require_auth
def get_sale_route(sale_id: int):
    console = get_console()
    sale = console.sales.get(sale_id)
    if console.sales.error:
        return store_error(console.sales)
    if sale is None:
        return jsonify({"error": "Sale not found"}), 404

    clients = console.clients.fetch_all()
    products = {p["id"]: p["name"] for p in console.inventory.fetch_all()}
    annotated = console.sales.with_client_names(clients, [sale])[0]
    for line in annotated["lines"]:
        line["product_name"] = products.get(line["product_id"])
    return jsonify({"sale": annotated}), 200


@sales_bp.get("/<int:sale_id>/invoice.pdf")
@require_auth
def invoice_pdf_route(sale_id: int):
    console = get_console()
    sale = console.sales.get(sale_id)
    if console.sales.error:
        return store_error(console.sales)
    if sale is None:
        return jsonify({"error": "Sale not found"}), 404

    try:
        rendered = console.renderer.render(console.invoice_for(sale))
    except Exception:
        current_app.logger.exception("Failed to render invoice for sale %s", sale_id)
        return jsonify({"error": "Failed to generate invoice"}), 500

    current_app.logger.info(
        "Rendered %s (%d pages)", rendered.filename, len(rendered.pages)
    )
    return send_file(
        io.BytesIO(rendered.content),
        mimetype="application/pdf",
        as_attachment=True,
        download_name=rendered.filename,
    )
