# storefront/services/coupon_service.py
from datetime import datetime
from decimal import Decimal

from flask import current_app
from sqlalchemy import func, or_, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ..extensions import db
from ..errors import Ineligible, InvalidArgument, NotFound, UpstreamFailure
from ..model import Coupon, CouponUsage
from ..model.coupon import COUPON_ACTIVE, COUPON_FIXED, COUPON_PERCENTAGE
from ..utils.money import D, ZERO, percent_of, round_money
from ..utils.parsing import utcnow

CUSTOMER_RETAIL = "retail"
CUSTOMER_RESELLER = "reseller"
CUSTOMER_TYPES = (CUSTOMER_RETAIL, CUSTOMER_RESELLER)


# ---- store lookups ---------------------------------------------------------

def get_by_code(code: str) -> Coupon:
    if not code:
        raise NotFound("invalid or expired coupon code")
    try:
        coupon = Coupon.query.filter(Coupon.code == code).first()
    except SQLAlchemyError as e:
        raise UpstreamFailure("coupon lookup failed") from e
    if coupon is None:
        raise NotFound("invalid or expired coupon code")
    return coupon

def count_user_usage(coupon_id, user_id) -> int:
    try:
        return (
            db.session.query(func.count(CouponUsage.id))
            .filter(CouponUsage.coupon_id == coupon_id, CouponUsage.user_id == user_id)
            .scalar()
        ) or 0
    except SQLAlchemyError as e:
        raise UpstreamFailure("coupon usage lookup failed") from e


# ---- eligibility -----------------------------------------------------------

def _customer_allowed(coupon: Coupon, customer_type) -> bool:
    if customer_type == CUSTOMER_RETAIL:
        return bool(coupon.for_retail)
    if customer_type == CUSTOMER_RESELLER:
        return bool(coupon.for_reseller)
    return False

def _check_user_cap(coupon: Coupon, user_id):
    if not coupon.max_uses_per_user:
        return
    if user_id is None:
        raise Ineligible(Ineligible.USER_LIMIT_REACHED)
    if count_user_usage(coupon.id, user_id) >= coupon.max_uses_per_user:
        raise Ineligible(Ineligible.USER_LIMIT_REACHED)

def validate_coupon(code: str, user_id, purchase_amount, customer_type, now: datetime | None = None) -> Coupon:
    """
    Return the coupon when every eligibility rule passes, in this order:
    status, start, end, minimum purchase, customer type, global cap,
    per-user cap. The first failing rule raises Ineligible; the coupon is
    not marked as used.
    """
    coupon = get_by_code(code)
    now = now or utcnow()
    amount = D(purchase_amount)

    if coupon.status != COUPON_ACTIVE:
        raise Ineligible(Ineligible.INACTIVE)
    if coupon.starts_at and now < coupon.starts_at:
        raise Ineligible(Ineligible.NOT_STARTED)
    if coupon.ends_at and now > coupon.ends_at:
        raise Ineligible(Ineligible.EXPIRED)
    if coupon.min_purchase and amount < D(coupon.min_purchase):
        raise Ineligible(Ineligible.MIN_PURCHASE)
    if not _customer_allowed(coupon, customer_type):
        raise Ineligible(Ineligible.CUSTOMER_TYPE)
    if coupon.max_uses and coupon.usage_count >= coupon.max_uses:
        raise Ineligible(Ineligible.USAGE_EXHAUSTED)
    _check_user_cap(coupon, user_id)

    return coupon

def calculate_discount(coupon: Coupon, purchase_amount) -> Decimal:
    amount = D(purchase_amount)
    if amount <= 0:
        return ZERO
    if coupon.ctype == COUPON_PERCENTAGE:
        discount = percent_of(amount, coupon.value)
        if coupon.max_discount and discount > D(coupon.max_discount):
            discount = D(coupon.max_discount)
    elif coupon.ctype == COUPON_FIXED:
        discount = D(coupon.value)
    else:
        return ZERO
    # never discount past the purchase
    return round_money(max(ZERO, min(discount, amount)))


# ---- redemption ------------------------------------------------------------

def record_usage(coupon_id, user_id, order_id, discount_amount) -> CouponUsage:
    """
    Append a ledger row and bump usage_count as one unit.

    The coupon row is locked for the transaction and the increment only
    happens while usage_count is still below max_uses, so concurrent
    redemptions near the cap cannot oversell it.
    """
    if user_id is None or order_id is None:
        raise InvalidArgument("user_id and order_id are required")
    try:
        coupon = (
            db.session.query(Coupon)
            .filter(Coupon.id == coupon_id)
            .with_for_update()
            .one_or_none()
        )
        if coupon is None:
            raise NotFound(f"coupon {coupon_id} not found")

        _check_user_cap(coupon, user_id)

        stmt = (
            update(Coupon)
            .where(Coupon.id == coupon_id)
            .where(or_(
                Coupon.max_uses.is_(None),
                Coupon.max_uses == 0,
                Coupon.usage_count < Coupon.max_uses,
            ))
            .values(usage_count=Coupon.usage_count + 1)
            .execution_options(synchronize_session=False)
        )
        if db.session.execute(stmt).rowcount == 0:
            raise Ineligible(Ineligible.USAGE_EXHAUSTED)

        usage = CouponUsage(
            coupon_id=coupon_id,
            user_id=user_id,
            order_id=order_id,
            discount_amount=round_money(discount_amount),
        )
        db.session.add(usage)
        db.session.commit()
    except (NotFound, UpstreamFailure):  # NotFound includes Ineligible
        db.session.rollback()
        raise
    except IntegrityError as e:
        db.session.rollback()
        raise InvalidArgument(f"coupon {coupon_id} already redeemed for order {order_id}") from e
    except SQLAlchemyError as e:
        db.session.rollback()
        raise UpstreamFailure("recording coupon usage failed") from e

    current_app.logger.info(
        "coupon %s redeemed by user %s on order %s (%s)", coupon_id, user_id, order_id, usage.discount_amount,
    )
    return usage
