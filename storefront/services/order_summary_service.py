# storefront/services/order_summary_service.py
from dataclasses import dataclass, field, replace
from decimal import Decimal

from flask import current_app

from ..errors import InvalidArgument
from ..utils.money import D, ZERO, round_money, to_float_money
from .coupon_service import calculate_discount, validate_coupon
from .price_service import PriceQuote, PriceRequest, calculate_price
from .shipping_service import ShippingItem, ShippingRequest, calculate_shipping_cost


@dataclass
class OrderSummary:
    customer_type: str
    subtotal: Decimal
    total_discount: Decimal
    shipping_cost: Decimal
    total_weight: Decimal
    tax_amount: Decimal
    total: Decimal
    item_count: int
    lines: list[PriceQuote] = field(default_factory=list)
    coupon_applied: bool = False
    coupon_code: str | None = None
    coupon_discount: Decimal = ZERO

    @property
    def purchase_amount(self) -> Decimal:
        """Amount coupons are validated against: subtotal after item discounts."""
        return self.subtotal - self.total_discount

    def as_api(self):
        return {
            "customer_type": self.customer_type,
            "subtotal": to_float_money(self.subtotal),
            "total_discount": to_float_money(self.total_discount),
            "shipping_cost": to_float_money(self.shipping_cost),
            "total_weight": float(self.total_weight),
            "tax_amount": to_float_money(self.tax_amount),
            "total": to_float_money(self.total),
            "item_count": self.item_count,
            "coupon_applied": self.coupon_applied,
            "coupon_code": self.coupon_code,
            "coupon_discount": to_float_money(self.coupon_discount),
            "items": [q.as_api() for q in self.lines],
        }


def _shipment_for(items, shipping: ShippingRequest) -> ShippingRequest:
    # without explicit parcels, ship the priced lines at catalog weight
    if shipping.items:
        return shipping
    parcels = [
        ShippingItem(product_id=i.product_id, variant_id=i.variant_id, quantity=i.quantity)
        for i in items
    ]
    return replace(shipping, items=parcels)

def calculate_order_summary(items: list[PriceRequest], shipping: ShippingRequest, customer_type, coupon_code=None, user_id=None, now=None) -> OrderSummary:
    """
    Price every line, ship once, tax the discounted subtotal.

    Order:
      1) per-line pricing (first failure aborts the whole summary)
      2) shipping for the aggregated shipment
      3) tax = (subtotal - discounts) x TAX_RATE
      4) optional coupon against (subtotal - discounts), taken off the total
    """
    if not items:
        raise InvalidArgument("no items provided")

    subtotal = ZERO
    total_discount = ZERO
    item_count = 0
    lines = []

    for item in items:
        quote = calculate_price(item.product_id, item.quantity, customer_type, item.variant_id, now=now)
        subtotal += quote.base_price
        total_discount += quote.savings
        item_count += item.quantity
        lines.append(quote)

    shipping_quote = calculate_shipping_cost(_shipment_for(items, shipping))

    tax_rate = D(current_app.config["TAX_RATE"])
    tax_amount = round_money((subtotal - total_discount) * tax_rate)
    total = subtotal - total_discount + shipping_quote.shipping_cost + tax_amount

    summary = OrderSummary(
        customer_type=customer_type,
        subtotal=round_money(subtotal),
        total_discount=round_money(total_discount),
        shipping_cost=shipping_quote.shipping_cost,
        total_weight=shipping_quote.total_weight,
        tax_amount=tax_amount,
        total=round_money(total),
        item_count=item_count,
        lines=lines,
    )

    if coupon_code:
        summary = validate_and_apply_coupon(summary, coupon_code, user_id, now=now)
    return summary

def validate_and_apply_coupon(summary: OrderSummary, code: str, user_id=None, now=None) -> OrderSummary:
    coupon = validate_coupon(code, user_id, summary.purchase_amount, summary.customer_type, now=now)
    amount = calculate_discount(coupon, summary.purchase_amount)
    current_app.logger.debug("coupon %s applied to summary: -%s", code, amount)
    return replace(
        summary,
        total=round_money(summary.total - amount),
        coupon_applied=True,
        coupon_code=code,
        coupon_discount=amount,
    )
