# Overview: Service-layer operations for the dashboard; headline metrics over cached store contents.

from __future__ import annotations

from datetime import datetime, timedelta

from medsupply.time_utils import parse_iso_datetime, utcnow
from .sales_store import UNKNOWN_CLIENT

RECENT_SALES_WINDOW = timedelta(days=30)
ACTIVE_CLIENT_WINDOW = timedelta(days=90)
RECENT_SALES_LIMIT = 5


def _sale_time(sale: dict) -> datetime:
    return parse_iso_datetime(sale["created_at"])


def summarize(
    clients: list[dict],
    products: list[dict],
    sales: list[dict],
    *,
    low_stock_threshold: int = 10,
    now: datetime | None = None,
) -> dict:
    """
    Dashboard numbers:
    - total revenue: sum of stored sale totals
    - low stock: products with quantity below the threshold
    - recent sales: sales in the last 30 days
    - active clients: distinct clients with a sale in the last 90 days
    """
    now = now or utcnow()
    names = {c["id"]: c["name"] for c in clients}

    recent_cutoff = now - RECENT_SALES_WINDOW
    active_cutoff = now - ACTIVE_CLIENT_WINDOW

    latest = sorted(sales, key=_sale_time, reverse=True)[:RECENT_SALES_LIMIT]

    return {
        "total_revenue_cents": sum(s["total_cents"] for s in sales),
        "low_stock_products": sum(1 for p in products if p["quantity"] < low_stock_threshold),
        "recent_sales": sum(1 for s in sales if _sale_time(s) >= recent_cutoff),
        "active_clients": len({s["client_id"] for s in sales if _sale_time(s) >= active_cutoff}),
        "counts": {
            "clients": len(clients),
            "products": len(products),
            "sales": len(sales),
        },
        "latest_sales": [
            {
                "id": s["id"],
                "invoice_number": s["invoice_number"],
                "client_name": names.get(s["client_id"], UNKNOWN_CLIENT),
                "total_cents": s["total_cents"],
                "created_at": s["created_at"],
            }
            for s in latest
        ],
    }
