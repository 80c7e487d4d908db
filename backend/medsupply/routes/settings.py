# Overview: Flask API routes for company settings; parses input and returns JSON responses.

from flask import Blueprint, request, jsonify
from werkzeug.utils import secure_filename

from . import store_error
from ..console import get_console
from ..models import CompanySettings
from ..services.settings_store import SettingsError
from ..validation import ModelValidationPolicy, validate_payload, ValidationError
from ..decorators import require_auth

SETTINGS_POLICY = ModelValidationPolicy(
    writable_fields={"name", "address", "phone", "email", "logo_url"},
    required_on_create={"name"},
)

settings_bp = Blueprint("settings", __name__, url_prefix="/api/settings")


@settings_bp.get("")
@require_auth
def get_settings_route():
    """Company settings; created with defaults on first read."""
    store = get_console().settings
    settings = store.fetch()
    if store.error:
        return store_error(store)
    return jsonify({"settings": settings}), 200


@settings_bp.put("")
@require_auth
def update_settings_route():
    """Replace the company settings record."""
    payload = request.get_json(silent=True) or {}
    try:
        patch = validate_payload(model=CompanySettings, payload=payload, policy=SETTINGS_POLICY, partial=False)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    try:
        settings = get_console().settings.update(patch)
    except SettingsError as e:
        return jsonify({"error": str(e)}), 500
    return jsonify({"settings": settings}), 200


@settings_bp.post("/logo")
@require_auth
def upload_logo_route():
    """
    Upload a logo image (multipart field "file").

    Returns its URL; save it as logo_url through PUT /api/settings.
    """
    upload = request.files.get("file")
    if upload is None:
        return jsonify({"error": "file is required"}), 400

    try:
        url = get_console().settings.upload_logo(secure_filename(upload.filename or ""), upload.read())
    except SettingsError as e:
        return jsonify({"error": str(e)}), 500
    return jsonify({"logo_url": url}), 201
