# ------- storefront/utils/decorators.py -------
from functools import wraps
from flask import request, jsonify
from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request

from ..utils.api import api_error
from ..utils.parsing import parse_int


def require_json(f):
    @wraps(f)
    def wrapper(*args, **kwargs):
        if not request.is_json:
            return jsonify(api_error("Content-Type must be application/json")), 415
        if not isinstance(request.get_json(silent=True), dict):
            return jsonify(api_error("Invalid request body")), 400
        return f(*args, **kwargs)
    return wrapper

def current_user_id(fallback=None):
    """JWT identity when a valid token is sent, else `fallback` (e.g. body user_id)."""
    verify_jwt_in_request(optional=True)
    uid = parse_int(get_jwt_identity())
    return uid if uid is not None else parse_int(fallback)
