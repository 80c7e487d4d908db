# Overview: Serves files written by blob storage (uploaded logos).

from flask import Blueprint, jsonify, send_file

from ..console import get_console

blobs_bp = Blueprint("blobs", __name__, url_prefix="/api/blobs")


@blobs_bp.get("/<path:name>")
def get_blob_route(name: str):
    blobs = get_console().blobs
    path = blobs.resolve(blobs.base_url + name)
    if path is None:
        return jsonify({"error": "Not found"}), 404
    return send_file(path)
