# storefront/pricing/routes.py
from __future__ import annotations
from flask import request, jsonify, current_app

from ..utils.api import api_ok, api_error
from ..utils.decorators import require_json, current_user_id
from ..utils.money import to_float_money
from ..utils.parsing import parse_int, parse_opt_int, parse_decimal
from ..services import coupon_service, shipping_service
from ..services.coupon_service import CUSTOMER_RETAIL, CUSTOMER_RESELLER, CUSTOMER_TYPES
from ..services.price_service import PriceRequest, calculate, apply_coupon_to_quote
from ..services.shipping_service import CARRIERS, ShippingItem, ShippingRequest
from ..services.order_summary_service import calculate_order_summary
from . import bp

# ---- standard API response format ------------------------------------------
def ok(msg, data=None, status=200):
    r = jsonify(api_ok(msg, data)); r.status_code = status; return r
def err(msg, status=400, data=None):
    r = jsonify(api_error(msg, data)); r.status_code = status; return r


class _BadRequest(Exception):
    pass


# ---- request parsing -------------------------------------------------------

def _text(value) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise _BadRequest("expected a string value")
    return value.strip()

def _customer_type(value) -> str:
    ctype = (value or "").strip().lower() if isinstance(value, str) else ""
    if ctype not in CUSTOMER_TYPES:
        raise _BadRequest("Invalid customer type. Must be 'retail' or 'reseller'")
    return ctype

def _shipping_type(value) -> str:
    stype = (value or "").strip().lower() if isinstance(value, str) else ""
    if stype not in CARRIERS:
        raise _BadRequest(f"Invalid shipping type. Valid types: {', '.join(CARRIERS)}")
    return stype

def _price_request(d: dict, customer_type: str) -> PriceRequest:
    if not isinstance(d, dict):
        raise _BadRequest("each item must be an object")
    product_id = parse_int(d.get("product_id"))
    if product_id is None:
        raise _BadRequest("product_id is required")
    quantity = parse_int(d.get("quantity"))
    if quantity is None:
        raise _BadRequest("quantity must be a whole number")
    return PriceRequest(
        product_id=product_id,
        quantity=quantity,
        customer_type=customer_type,
        variant_id=parse_opt_int(d.get("variant_id")),
    )

def _shipping_request(d: dict | None) -> ShippingRequest:
    if d is not None and not isinstance(d, dict):
        raise _BadRequest("shipping must be an object")
    d = d or {}
    raw_items = d.get("items") or []
    if not isinstance(raw_items, list):
        raise _BadRequest("items must be a list")
    items = []
    for raw in raw_items:
        if not isinstance(raw, dict):
            raise _BadRequest("each shipping item must be an object")
        weight = None
        if raw.get("weight") is not None:
            weight = parse_decimal(raw.get("weight"))
            if weight is None or weight < 0:
                raise _BadRequest("weight must be a non-negative number")
        quantity = parse_int(raw.get("quantity", 1))
        if quantity is None:
            raise _BadRequest("quantity must be a whole number")
        items.append(ShippingItem(
            product_id=parse_opt_int(raw.get("product_id")),
            variant_id=parse_opt_int(raw.get("variant_id")),
            quantity=quantity,
            weight=weight,
        ))
    return ShippingRequest(
        destination=_text(d.get("destination")),
        shipping_type=_shipping_type(d.get("shipping_type")),
        items=items,
    )

@bp.errorhandler(_BadRequest)
def _bad_request(e):
    return err(str(e), 400)


# ---- price -----------------------------------------------------------------

@bp.post("/calculate")
@require_json
def calculate_price():
    """
    Body: { "product_id": int, "variant_id"?: int, "quantity": int,
            "customer_type": "retail" | "reseller", "coupon_code"?: str, "user_id"?: int }
    """
    data = request.get_json(silent=True) or {}
    req = _price_request(data, _customer_type(data.get("customer_type")))
    quote = calculate(req)

    code = _text(data.get("coupon_code"))
    if code:
        quote = apply_coupon_to_quote(quote, code, current_user_id(data.get("user_id")))
    return ok("price calculated", quote.as_api())

@bp.get("/calculate")
def calculate_price_by_params():
    args = request.args
    if not args.get("product_id"):
        return err("product_id is required", 400)
    if parse_int(args.get("product_id")) is None:
        return err("Invalid product_id", 400)
    if args.get("variant_id") and parse_int(args.get("variant_id")) is None:
        return err("Invalid variant_id", 400)
    quantity = parse_int(args.get("quantity"))
    if quantity is None or quantity <= 0:
        return err("Invalid quantity. Must be a positive integer", 400)

    req = _price_request(args.to_dict(flat=True), _customer_type(args.get("customer_type")))
    return ok("price calculated", calculate(req).as_api())

@bp.get("/products/<int:product_id>")
def get_pricing_info(product_id: int):
    retail = calculate(PriceRequest(product_id=product_id, quantity=1, customer_type=CUSTOMER_RETAIL))
    reseller = calculate(PriceRequest(product_id=product_id, quantity=1, customer_type=CUSTOMER_RESELLER))
    return ok("pricing info", {"retail": retail.as_api(), "reseller": reseller.as_api()})


# ---- shipping --------------------------------------------------------------

@bp.post("/shipping")
@require_json
def calculate_shipping_cost():
    """
    Body: { "items": [{ "product_id"?: int, "quantity": int, "weight"?: kg }],
            "destination": "ID-JK", "shipping_type": "jne" | "tiki" | "pos" | "sicepat" }
    """
    data = request.get_json(silent=True) or {}
    quote = shipping_service.calculate_shipping_cost(_shipping_request(data))
    return ok("shipping calculated", quote.as_api())

@bp.get("/shipping/free")
def check_free_shipping():
    order_amount = parse_decimal(request.args.get("order_amount"))
    if order_amount is None or order_amount < 0:
        return err("order_amount must be a non-negative number", 400)
    region_code = (request.args.get("region_code") or "").strip()
    free = shipping_service.is_free_shipping(order_amount, region_code)
    return ok("free shipping checked", {
        "free_shipping": free,
        "order_amount": to_float_money(order_amount),
        "region_code": region_code,
    })


# ---- order summary ---------------------------------------------------------

@bp.post("/order-summary")
@require_json
def order_summary():
    """
    Body: { "items": [...price items], "shipping": {...}, "customer_type": str,
            "coupon_code"?: str, "user_id"?: int }
    """
    data = request.get_json(silent=True) or {}
    customer_type = _customer_type(data.get("customer_type"))
    raw_items = data.get("items")
    if not isinstance(raw_items, list) or not raw_items:
        return err("items must be a non-empty list", 400)
    items = [_price_request(i, customer_type) for i in raw_items]
    shipping = _shipping_request(data.get("shipping"))

    code = _text(data.get("coupon_code")) or None
    user_id = current_user_id(data.get("user_id")) if code else None

    summary = calculate_order_summary(items, shipping, customer_type, coupon_code=code, user_id=user_id)
    return ok("order summary", summary.as_api())


# ---- coupons ---------------------------------------------------------------

@bp.post("/coupons/validate")
@require_json
def validate_coupon():
    """Body: { "code": str, "purchase_amount": number, "customer_type": str, "user_id"?: int }"""
    data = request.get_json(silent=True) or {}
    code = _text(data.get("code"))
    if not code:
        return err("code is required", 400)
    purchase_amount = parse_decimal(data.get("purchase_amount"))
    if purchase_amount is None or purchase_amount < 0:
        return err("purchase_amount must be a non-negative number", 400)
    customer_type = _customer_type(data.get("customer_type"))

    coupon = coupon_service.validate_coupon(code, current_user_id(data.get("user_id")), purchase_amount, customer_type)
    discount = coupon_service.calculate_discount(coupon, purchase_amount)
    return ok("coupon valid", {
        "valid": True,
        "code": coupon.code,
        "coupon_name": coupon.name,
        "discount_amount": to_float_money(discount),
    })

@bp.post("/coupons/redeem")
@require_json
def redeem_coupon():
    """
    Called by the checkout workflow once an order is placed.
    Body: { "code": str, "order_id": int, "discount_amount": number, "user_id"?: int }
    """
    data = request.get_json(silent=True) or {}
    code = _text(data.get("code"))
    if not code:
        return err("code is required", 400)
    order_id = parse_int(data.get("order_id"))
    if order_id is None:
        return err("order_id is required", 400)
    user_id = current_user_id(data.get("user_id"))
    if user_id is None:
        return err("user_id is required", 400)
    discount_amount = parse_decimal(data.get("discount_amount"))
    if discount_amount is None or discount_amount < 0:
        return err("discount_amount must be a non-negative number", 400)

    coupon = coupon_service.get_by_code(code)
    usage = coupon_service.record_usage(coupon.id, user_id, order_id, discount_amount)
    current_app.logger.debug("usage row %s written for coupon %s", usage.id, code)
    return ok("coupon redeemed", usage.as_api(), status=201)
