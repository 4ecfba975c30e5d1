from flask import Blueprint

bp = Blueprint("pricing", __name__, url_prefix="/api/v1/pricing")

from . import routes  # noqa: E402,F401
