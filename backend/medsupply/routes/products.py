# Overview: Flask API routes for products operations; parses input and returns JSON responses.

from flask import Blueprint, request, jsonify

from . import store_error
from ..console import get_console
from ..models import Product
from ..services.detail_view import DetailView
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    enforce_rules_product,
    ValidationError,
)
from ..decorators import require_auth

PRODUCT_POLICY = ModelValidationPolicy(
    writable_fields={"code", "name", "description", "price_cents", "quantity"},
    required_on_create={"code", "name", "price_cents", "quantity"},
)

products_bp = Blueprint("products", __name__, url_prefix="/api/products")


def _load(product_id: int):
    store = get_console().inventory
    store.fetch_all()
    return store, store.find(product_id)


@products_bp.get("")
@require_auth
def list_products():
    """
    List products.

    Query params:
    - q: str (optional) - name prefix search
    - in_stock: 1 (optional) - only products with quantity > 0
    """
    store = get_console().inventory
    items = store.search(request.args.get("q"))
    if store.error:
        return store_error(store)
    if request.args.get("in_stock") in ("1", "true"):
        items = store.in_stock()
    return jsonify({"items": items, "count": len(items)}), 200


@products_bp.post("")
@require_auth
def create_product_route():
    payload = request.get_json(silent=True) or {}
    try:
        patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=False)
        enforce_rules_product(patch)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    store = get_console().inventory
    new_id = store.add(patch)
    if new_id is None:
        return store_error(store)
    return jsonify({"product": store.find(new_id)}), 201


@products_bp.get("/<int:product_id>")
@require_auth
def get_product_route(product_id: int):
    store, product = _load(product_id)
    if store.error:
        return store_error(store)
    if product is None:
        return jsonify({"error": "Product not found"}), 404
    return jsonify({"product": product}), 200


@products_bp.put("/<int:product_id>")
@require_auth
def update_product_route(product_id: int):
    payload = request.get_json(silent=True) or {}
    try:
        patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=True)
        enforce_rules_product(patch)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    store, product = _load(product_id)
    if product is None:
        return jsonify({"error": "Product not found"}), 404

    view = DetailView(store, product_id)
    view.begin_edit()
    if not view.save(patch):
        return store_error(store)
    return jsonify({"product": view.record}), 200


@products_bp.delete("/<int:product_id>")
@require_auth
def delete_product_route(product_id: int):
    """Delete a product. Sales keep their copied line prices."""
    store, product = _load(product_id)
    if product is None:
        return jsonify({"error": "Product not found"}), 404

    if not DetailView(store, product_id).delete():
        return store_error(store)
    return jsonify({"ok": True}), 200
