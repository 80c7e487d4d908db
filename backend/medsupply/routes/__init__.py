from flask import jsonify


def store_error(store):
    """JSON response for a store operation that recorded a backend failure."""
    return jsonify({"error": store.error}), 500
