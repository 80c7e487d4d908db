# Overview: Flask API routes for auth operations; parses input and returns JSON responses.

# backend/medsupply/routes/auth.py
"""
Authentication API routes

Email/password registration and login return a bearer token that must be
sent as "Authorization: Bearer <token>" on every other /api route.
"""

from flask import Blueprint, request, jsonify, current_app, g

from ..console import get_console
from ..services.auth_service import AuthError
from ..decorators import require_auth


auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


def _credentials():
    data = request.get_json(silent=True) or {}
    return data.get("email"), data.get("password")


@auth_bp.post("/register")
def register_route():
    email, password = _credentials()
    try:
        user, token = get_console().auth.sign_up(email, password)
    except AuthError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to register user")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"user": user.to_dict(), "token": token}), 201


@auth_bp.post("/login")
def login_route():
    email, password = _credentials()
    if not all([email, password]):
        return jsonify({"error": "email and password required"}), 400

    try:
        user, token = get_console().auth.sign_in(email, password)
    except AuthError as e:
        return jsonify({"error": str(e)}), 401
    except Exception:
        current_app.logger.exception("Failed to login user")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"user": user.to_dict(), "token": token}), 200


@auth_bp.post("/logout")
@require_auth
def logout_route():
    try:
        get_console().auth.sign_out(g.session_token)
    except Exception:
        current_app.logger.exception("Failed to logout user")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"ok": True}), 200


@auth_bp.get("/me")
@require_auth
def me_route():
    return jsonify({"user": g.current_user.to_dict()}), 200
