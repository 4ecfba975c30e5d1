# storefront/services/shipping_service.py
from dataclasses import dataclass, field
from decimal import Decimal

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from ..errors import InvalidArgument, UpstreamFailure
from ..model import ShippingZone
from ..model.shipping_zone import ZONE_ACTIVE
from ..utils.money import D, ZERO, round_money, to_float_money
from .catalog_service import get_product

CARRIERS = ("jne", "tiki", "pos", "sicepat")


@dataclass
class ShippingItem:
    product_id: int | None = None
    quantity: int = 1
    weight: Decimal | None = None        # kg per unit; catalog weight when None
    variant_id: int | None = None


@dataclass
class ShippingRequest:
    destination: str = ""                # region code, e.g. "ID-JK"
    shipping_type: str = "jne"
    items: list[ShippingItem] = field(default_factory=list)


@dataclass
class ShippingQuote:
    total_weight: Decimal
    shipping_cost: Decimal
    shipping_type: str
    estimated_days: int
    zone_id: int | None = None

    def as_api(self):
        return {
            "total_weight": float(self.total_weight),
            "shipping_cost": to_float_money(self.shipping_cost),
            "shipping_type": self.shipping_type,
            "estimated_days": self.estimated_days,
            "zone_id": self.zone_id,
        }


# ---- zone store --------------------------------------------------------------

def list_active_zones():
    try:
        return (
            ShippingZone.query
            .filter(ShippingZone.status == ZONE_ACTIVE)
            .order_by(ShippingZone.created_at.desc(), ShippingZone.id.desc())
            .all()
        )
    except SQLAlchemyError as e:
        raise UpstreamFailure("shipping zone lookup failed") from e

def resolve_zone(region_code: str) -> ShippingZone | None:
    """Newest active zone that includes `region_code` and does not exclude it."""
    if not region_code:
        return None
    for zone in list_active_zones():
        if zone.covers(region_code):
            return zone
    return None


# ---- rates -------------------------------------------------------------------

def _default_rate(carrier: str) -> Decimal:
    rates = current_app.config["DEFAULT_SHIPPING_RATES"]
    default_carrier = current_app.config["DEFAULT_CARRIER"]
    return D(rates.get(carrier, rates[default_carrier]))

def shipping_cost(weight_kg, carrier: str, zone: ShippingZone | None = None) -> Decimal:
    """
    weight x per-kg rate, floored at the minimum cost, plus the handling fee.
    Without a zone the hardcoded defaults apply and there is no fee.
    """
    if zone is not None:
        rate = D(zone.rate_for(carrier))
        minimum = D(zone.minimum_cost)
        handling_fee = D(zone.handling_fee)
    else:
        rate = _default_rate(carrier)
        minimum = D(current_app.config["DEFAULT_MINIMUM_SHIPPING_COST"])
        handling_fee = ZERO

    cost = D(weight_kg) * rate
    if cost < minimum:
        cost = minimum
    return round_money(cost + handling_fee)

def is_free_shipping(order_amount, region_code: str) -> bool:
    zone = resolve_zone(region_code)
    if zone is None:
        return False
    return bool(zone.free_shipping_enabled) and D(order_amount) >= D(zone.free_shipping_threshold)

def estimate_delivery_days(carrier: str) -> int:
    return current_app.config["DELIVERY_DAYS"].get(carrier, current_app.config["DEFAULT_DELIVERY_DAYS"])


# ---- quote -------------------------------------------------------------------

def _item_weight(item: ShippingItem) -> Decimal:
    if item.weight is not None:
        return D(item.weight)
    if item.product_id is None:
        raise InvalidArgument("shipping item needs a weight or a product_id")
    return D(get_product(item.product_id).weight)

def total_weight(items) -> Decimal:
    total = ZERO
    for item in items:
        if item.quantity is None or item.quantity <= 0:
            raise InvalidArgument("quantity must be greater than 0")
        total += _item_weight(item) * item.quantity
    return total

def calculate_shipping_cost(req: ShippingRequest) -> ShippingQuote:
    if not req.items:
        raise InvalidArgument("no items provided")

    weight = total_weight(req.items)
    zone = resolve_zone(req.destination)
    if zone is None and req.destination:
        current_app.logger.debug("no shipping zone for %s; using default rates", req.destination)

    return ShippingQuote(
        total_weight=weight,
        shipping_cost=shipping_cost(weight, req.shipping_type, zone),
        shipping_type=req.shipping_type,
        estimated_days=estimate_delivery_days(req.shipping_type),
        zone_id=zone.id if zone is not None else None,
    )
