# storefront/services/price_service.py
"""
Line-item pricing.

Discount precedence is a fixed chain evaluated top-down, first hit wins:

  1) flash sale override price (any customer, any quantity)
  2) reseller volume tiering
  3) retail bulk discount
  4) no discount

Tier percentages are cliffs: once a threshold is met the whole quantity gets
that percentage, always taken from the base unit price.
"""
from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal

from ..errors import InvalidArgument
from ..utils.money import D, ZERO, percent_of, round_money, to_float_money
from ..utils.parsing import format_iso8601
from .catalog_service import get_product, get_variant
from .coupon_service import CUSTOMER_RESELLER, CUSTOMER_RETAIL, CUSTOMER_TYPES, calculate_discount, validate_coupon
from .flash_sale_service import active_override

DISCOUNT_NONE = "none"
DISCOUNT_BULK = "bulk"
DISCOUNT_RESELLER = "reseller"
DISCOUNT_FLASH_SALE = "flash_sale"
DISCOUNT_COUPON = "coupon"

# (min quantity, percent), highest threshold first
RESELLER_TIERS = ((100, 30), (50, 25), (20, 20), (10, 15), (5, 10), (1, 5))
RETAIL_BULK_TIERS = ((10, 10), (5, 5))


@dataclass
class PriceRequest:
    product_id: int
    quantity: int
    customer_type: str = CUSTOMER_RETAIL
    variant_id: int | None = None


@dataclass(frozen=True)
class _PricingContext:
    product_id: int
    base_price: Decimal
    quantity: int
    customer_type: str
    now: datetime | None


@dataclass(frozen=True)
class _UnitPrice:
    price: Decimal
    discount_type: str
    flash_sale_end: datetime | None = None


@dataclass
class PriceQuote:
    product_id: int
    variant_id: int | None
    quantity: int
    customer_type: str
    original_price: Decimal          # base unit price
    unit_price: Decimal              # final unit price
    base_price: Decimal              # base unit price x quantity
    final_price: Decimal             # final unit price x quantity
    discount: Decimal                # per-unit discount
    savings: Decimal                 # per-unit discount x quantity
    discount_type: str = DISCOUNT_NONE
    flash_sale_active: bool = False
    flash_sale_end: str | None = None
    coupon_applied: bool = False
    coupon_code: str | None = None
    coupon_discount: Decimal = ZERO

    def as_api(self):
        return {
            "product_id": self.product_id,
            "variant_id": self.variant_id,
            "quantity": self.quantity,
            "customer_type": self.customer_type,
            "original_price": to_float_money(self.original_price),
            "unit_price": to_float_money(self.unit_price),
            "base_price": to_float_money(self.base_price),
            "final_price": to_float_money(self.final_price),
            "discount": to_float_money(self.discount),
            "savings": to_float_money(self.savings),
            "discount_type": self.discount_type,
            "flash_sale_active": self.flash_sale_active,
            "flash_sale_end": self.flash_sale_end,
            "coupon_applied": self.coupon_applied,
            "coupon_code": self.coupon_code,
            "coupon_discount": to_float_money(self.coupon_discount),
        }


# ---- tier tables ---------------------------------------------------------------

def _tier_percent(tiers, quantity: int) -> int:
    for min_qty, percent in tiers:
        if quantity >= min_qty:
            return percent
    return 0

def reseller_discount_percent(quantity: int) -> int:
    return _tier_percent(RESELLER_TIERS, quantity)

def bulk_discount_percent(quantity: int) -> int:
    return _tier_percent(RETAIL_BULK_TIERS, quantity)


# ---- discount policies -----------------------------------------------------------

def _flash_sale_policy(ctx: _PricingContext) -> _UnitPrice | None:
    override = active_override(ctx.product_id, now=ctx.now)
    if override is None:
        return None
    return _UnitPrice(override.price, DISCOUNT_FLASH_SALE, flash_sale_end=override.ends_at)

def _reseller_policy(ctx: _PricingContext) -> _UnitPrice | None:
    if ctx.customer_type != CUSTOMER_RESELLER:
        return None
    percent = reseller_discount_percent(ctx.quantity)
    return _UnitPrice(ctx.base_price - percent_of(ctx.base_price, percent), DISCOUNT_RESELLER)

def _bulk_policy(ctx: _PricingContext) -> _UnitPrice | None:
    if ctx.customer_type != CUSTOMER_RETAIL:
        return None
    percent = bulk_discount_percent(ctx.quantity)
    if percent == 0:
        return None
    return _UnitPrice(ctx.base_price - percent_of(ctx.base_price, percent), DISCOUNT_BULK)

def _no_discount_policy(ctx: _PricingContext) -> _UnitPrice:
    return _UnitPrice(ctx.base_price, DISCOUNT_NONE)

DISCOUNT_POLICIES = (_flash_sale_policy, _reseller_policy, _bulk_policy, _no_discount_policy)

def resolve_unit_price(ctx: _PricingContext) -> _UnitPrice:
    for policy in DISCOUNT_POLICIES:
        unit = policy(ctx)
        if unit is not None:
            return unit
    raise AssertionError("discount policy chain must end with a catch-all")


# ---- public API ------------------------------------------------------------------

def _base_unit_price(product, variant_id):
    if variant_id is None:
        return D(product.price)
    variant = get_variant(variant_id)
    if variant.product_id != product.id:
        raise InvalidArgument("variant does not belong to the specified product")
    return D(variant.price) if variant.price is not None else D(product.price)

def calculate_price(product_id, quantity, customer_type=CUSTOMER_RETAIL, variant_id=None, now=None) -> PriceQuote:
    if quantity is None or quantity <= 0:
        raise InvalidArgument("quantity must be greater than 0")
    if customer_type not in CUSTOMER_TYPES:
        raise InvalidArgument("customer_type must be 'retail' or 'reseller'")

    product = get_product(product_id)
    base = _base_unit_price(product, variant_id)

    ctx = _PricingContext(product.id, base, quantity, customer_type, now)
    unit = resolve_unit_price(ctx)

    per_unit_discount = base - unit.price
    return PriceQuote(
        product_id=product.id,
        variant_id=variant_id,
        quantity=quantity,
        customer_type=customer_type,
        original_price=round_money(base),
        unit_price=round_money(unit.price),
        base_price=round_money(base * quantity),
        final_price=round_money(unit.price * quantity),
        discount=round_money(per_unit_discount),
        savings=round_money(per_unit_discount * quantity),
        discount_type=unit.discount_type,
        flash_sale_active=unit.discount_type == DISCOUNT_FLASH_SALE,
        flash_sale_end=format_iso8601(unit.flash_sale_end),
    )

def calculate(req: PriceRequest, now=None) -> PriceQuote:
    return calculate_price(req.product_id, req.quantity, req.customer_type, req.variant_id, now=now)

def apply_coupon_to_quote(quote: PriceQuote, code: str, user_id=None, now=None) -> PriceQuote:
    """Validate `code` against the quote's line total and fold its discount in."""
    if not code:
        return quote
    coupon = validate_coupon(code, user_id, quote.final_price, quote.customer_type, now=now)
    amount = calculate_discount(coupon, quote.final_price)
    return replace(
        quote,
        final_price=round_money(quote.final_price - amount),
        discount=round_money(quote.discount + amount),
        savings=round_money(quote.savings + amount),
        discount_type=DISCOUNT_COUPON,
        coupon_applied=True,
        coupon_code=code,
        coupon_discount=amount,
    )
