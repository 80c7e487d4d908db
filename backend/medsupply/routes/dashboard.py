# Overview: Flask API route for dashboard metrics.

from flask import Blueprint, jsonify

from . import store_error
from ..console import get_console
from ..services import dashboard_service
from ..decorators import require_auth

dashboard_bp = Blueprint("dashboard", __name__, url_prefix="/api/dashboard")


@dashboard_bp.get("")
@require_auth
def dashboard_route():
    console = get_console()
    for store in (console.clients, console.inventory, console.sales):
        store.fetch_all()
        if store.error:
            return store_error(store)

    summary = dashboard_service.summarize(
        console.clients.items,
        console.inventory.items,
        console.sales.items,
        low_stock_threshold=console.low_stock_threshold,
    )
    return jsonify(summary), 200
