# Overview: JSON payload validation for client, product, settings and sale requests.

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import Integer, String, Text


# $9,999,999.99
MAX_PRICE_CENTS = 999_999_999
MAX_QUANTITY = 1_000_000_000


class ValidationError(ValueError):
    """400-level input problem."""


@dataclass(frozen=True)
class ModelValidationPolicy:
    """
    Which model columns a request may write:
    - writable_fields: the allowlist; anything else is rejected
    - required_on_create: must be present on create (partial=False)
    """
    writable_fields: set[str]
    required_on_create: set[str] = field(default_factory=set)


def _parse_int(key: str, value: Any) -> int:
    # bool is an int subclass
    if isinstance(value, bool) or isinstance(value, float):
        raise ValidationError(f"{key} must be an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip()
        if re.fullmatch(r"-?[0-9]+", text):
            return int(text)
    raise ValidationError(f"{key} must be an integer")


def _coerce_value(col, value: Any):
    if isinstance(col.type, Integer):
        return _parse_int(col.key, value)
    if isinstance(col.type, (String, Text)):
        return str(value).strip()
    raise ValidationError(f"{col.key} cannot be set through the API")


def validate_payload(
    *,
    model,
    payload: dict,
    policy: ModelValidationPolicy,
    partial: bool,
) -> dict:
    """
    Check a JSON body against the model's columns and the policy.

    Returns a patch containing only allowed fields, with integers parsed,
    strings stripped, NOT NULL / blank / String(n) length enforced.
    partial=True validates only the keys present (update semantics).
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    if not partial:
        missing = sorted(f for f in policy.required_on_create if f not in payload)
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    cols = {c.key: c for c in model.__mapper__.columns}

    patch: dict = {}
    for k, raw in payload.items():
        if k not in policy.writable_fields or k not in cols:
            raise ValidationError(f"Field not allowed: {k}")
        col = cols[k]

        if raw is None:
            if not col.nullable:
                raise ValidationError(f"{k} cannot be null")
            patch[k] = None
            continue

        val = _coerce_value(col, raw)

        if isinstance(val, str):
            if val == "" and not col.nullable:
                raise ValidationError(f"{k} cannot be blank")
            length = getattr(col.type, "length", None)
            if length and len(val) > length:
                raise ValidationError(f"{k} exceeds max length {length}")

        patch[k] = val

    return patch


def enforce_rules_product(patch: dict) -> None:
    """Price and quantity bounds; both stay non-negative."""
    for key, ceiling in (("price_cents", MAX_PRICE_CENTS), ("quantity", MAX_QUANTITY)):
        value = patch.get(key)
        if value is None:
            continue
        if value < 0:
            raise ValidationError(f"{key} must be >= 0")
        if value > ceiling:
            raise ValidationError(f"{key} cannot exceed {ceiling}")


def parse_sale_request(payload: dict | None) -> tuple[int | None, list[tuple[Any, Any]]]:
    """
    Shape-check a new-sale payload: {"client_id": int, "items": [{"product_id", "quantity"}]}.

    Quantities are passed through untouched; the sale builder decides which
    lines it accepts.
    """
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    client_id = payload.get("client_id")
    if client_id is not None and (isinstance(client_id, bool) or not isinstance(client_id, int)):
        raise ValidationError("client_id must be an integer")

    items = payload.get("items") or []
    if not isinstance(items, list):
        raise ValidationError("items must be a list")

    lines = []
    for item in items:
        if not isinstance(item, dict):
            raise ValidationError("each item must be an object")
        lines.append((item.get("product_id"), item.get("quantity")))
    return client_id, lines
