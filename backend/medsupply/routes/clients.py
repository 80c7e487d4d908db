# Overview: Flask API routes for client operations; parses input and returns JSON responses.

from flask import Blueprint, request, jsonify

from . import store_error
from ..console import get_console
from ..models import Client
from ..services.detail_view import DetailView
from ..validation import ModelValidationPolicy, validate_payload, ValidationError
from ..decorators import require_auth

CLIENT_POLICY = ModelValidationPolicy(
    writable_fields={"name", "phone", "email", "address"},
    required_on_create={"name"},
)

clients_bp = Blueprint("clients", __name__, url_prefix="/api/clients")


def _load(client_id: int):
    store = get_console().clients
    store.fetch_all()
    return store, store.find(client_id)


@clients_bp.get("")
@require_auth
def list_clients():
    """
    List clients.

    Query params:
    - q: str (optional) - name prefix search
    """
    store = get_console().clients
    items = store.search(request.args.get("q"))
    if store.error:
        return store_error(store)
    return jsonify({"items": items, "count": len(items)}), 200


@clients_bp.post("")
@require_auth
def create_client_route():
    payload = request.get_json(silent=True) or {}
    try:
        patch = validate_payload(model=Client, payload=payload, policy=CLIENT_POLICY, partial=False)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    store = get_console().clients
    new_id = store.add(patch)
    if new_id is None:
        return store_error(store)
    return jsonify({"client": store.find(new_id)}), 201


@clients_bp.get("/<int:client_id>")
@require_auth
def get_client_route(client_id: int):
    """Client record plus its sales history."""
    store, client = _load(client_id)
    if store.error:
        return store_error(store)
    if client is None:
        return jsonify({"error": "Client not found"}), 404

    sales = get_console().sales
    sales.fetch_all()
    if sales.error:
        return store_error(sales)
    return jsonify({"client": client, "sales": sales.for_client(client_id)}), 200


@clients_bp.put("/<int:client_id>")
@require_auth
def update_client_route(client_id: int):
    payload = request.get_json(silent=True) or {}
    try:
        patch = validate_payload(model=Client, payload=payload, policy=CLIENT_POLICY, partial=True)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    store, client = _load(client_id)
    if client is None:
        return jsonify({"error": "Client not found"}), 404

    view = DetailView(store, client_id)
    view.begin_edit()
    if not view.save(patch):
        return store_error(store)
    return jsonify({"client": view.record}), 200


@clients_bp.delete("/<int:client_id>")
@require_auth
def delete_client_route(client_id: int):
    """Delete a client. Its sales are kept."""
    store, client = _load(client_id)
    if client is None:
        return jsonify({"error": "Client not found"}), 404

    if not DetailView(store, client_id).delete():
        return store_error(store)
    return jsonify({"ok": True}), 200
