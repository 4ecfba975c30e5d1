# storefront/errors.py
from flask import jsonify, current_app

from .utils.api import api_error


class AppError(Exception):
    code = "INTERNAL_ERROR"
    status_code = 500

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self):
        return f"[{self.code}] {self.message}"


class NotFound(AppError):
    code = "NOT_FOUND"
    status_code = 404


class InvalidArgument(AppError):
    code = "INVALID_INPUT"
    status_code = 400


class Ineligible(NotFound):
    """
    Coupon rejected by an eligibility rule.

    Subclasses NotFound so callers that only distinguish "usable" from
    "not found" keep working; `reason` names the first rule that failed.
    """
    code = "COUPON_INELIGIBLE"

    INACTIVE = "inactive"
    NOT_STARTED = "not_started"
    EXPIRED = "expired"
    MIN_PURCHASE = "min_purchase"
    CUSTOMER_TYPE = "customer_type"
    USAGE_EXHAUSTED = "usage_exhausted"
    USER_LIMIT_REACHED = "user_limit_reached"

    def __init__(self, reason: str, message: str = "invalid or expired coupon code"):
        super().__init__(message, {"reason": reason})
        self.reason = reason


class UpstreamFailure(AppError):
    code = "DATABASE_ERROR"
    status_code = 503


def register_error_handlers(app):
    @app.errorhandler(AppError)
    def handle_app_error(e: AppError):
        if e.status_code >= 500:
            current_app.logger.error("%s (caused by %r)", e, e.__cause__)
        else:
            current_app.logger.info("request rejected: %s", e)
        r = jsonify(api_error(e.message, {"code": e.code, **e.details}))
        r.status_code = e.status_code
        return r
