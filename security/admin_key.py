import secrets
from functools import wraps
from flask import current_app, jsonify, request

ADMIN_KEY_HEADER = "X-Admin-Key"

def has_admin_key() -> bool:
    expected = current_app.config.get("ADMIN_API_KEY")
    supplied = request.headers.get(ADMIN_KEY_HEADER)
    if not expected or not supplied:
        return False
    return secrets.compare_digest(expected.encode("utf-8"), supplied.encode("utf-8"))

def require_admin_key(fn):
    """
    Usage: @require_admin_key
    Admin endpoints stay closed (403) while ADMIN_API_KEY is unset.
    """
    @wraps(fn)
    def wrapper(*args, **kwargs):
        if not request.headers.get(ADMIN_KEY_HEADER):
            return jsonify(error="Admin key required"), 401
        if not has_admin_key():
            return jsonify(error="Forbidden"), 403
        return fn(*args, **kwargs)
    return wrapper
