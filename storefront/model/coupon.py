# --- storefront/model/coupon.py ---

from ..extensions import db
from sqlalchemy.sql import func

COUPON_PERCENTAGE = "percentage"
COUPON_FIXED = "fixed"

COUPON_ACTIVE = "active"
COUPON_INACTIVE = "inactive"
COUPON_EXPIRED = "expired"


class Coupon(db.Model):
    __tablename__ = "coupons"

    id = db.Column(db.Integer, primary_key=True)
    # case-sensitive, exact match
    code = db.Column(db.String(64), unique=True, nullable=False, index=True)
    name = db.Column(db.String(200), nullable=False, default="")

    # "percentage" or "fixed"
    ctype = db.Column(db.String(16), nullable=False, default=COUPON_PERCENTAGE)
    value = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    max_discount = db.Column(db.Numeric(12, 2), nullable=True)   # percentage coupons only

    status = db.Column(db.String(16), nullable=False, default=COUPON_ACTIVE, index=True)

    # Optional constraints; null or 0 means "no limit"
    min_purchase = db.Column(db.Numeric(12, 2), nullable=True)
    max_uses = db.Column(db.Integer, nullable=True)              # global usage cap
    max_uses_per_user = db.Column(db.Integer, nullable=True)
    starts_at = db.Column(db.DateTime, nullable=True)
    ends_at = db.Column(db.DateTime, nullable=True)

    for_retail = db.Column(db.Boolean, nullable=False, default=True)
    for_reseller = db.Column(db.Boolean, nullable=False, default=False)

    usage_count = db.Column(db.Integer, nullable=False, default=0)

    created_at = db.Column(db.DateTime, server_default=func.now())
    updated_at = db.Column(db.DateTime, onupdate=func.now(), server_default=func.now())

    usages = db.relationship("CouponUsage", back_populates="coupon", lazy="select")

    def as_api(self):
        return {
            "id": self.id,
            "code": self.code,
            "name": self.name,
            "ctype": self.ctype,
            "value": float(self.value or 0),
            "status": self.status,
            "usage_count": self.usage_count,
            "starts_at": self.starts_at.isoformat() if self.starts_at else None,
            "ends_at": self.ends_at.isoformat() if self.ends_at else None,
        }


class CouponUsage(db.Model):
    """Append-only redemption ledger; one row per coupon per order."""
    __tablename__ = "coupon_usages"
    __table_args__ = (
        db.UniqueConstraint("coupon_id", "order_id", name="uq_coupon_usage_order"),
    )

    id = db.Column(db.Integer, primary_key=True)
    coupon_id = db.Column(db.Integer, db.ForeignKey("coupons.id", ondelete="CASCADE"), index=True, nullable=False)
    user_id = db.Column(db.Integer, index=True, nullable=False)
    order_id = db.Column(db.Integer, index=True, nullable=False)
    discount_amount = db.Column(db.Numeric(12, 2), nullable=False)
    created_at = db.Column(db.DateTime, server_default=func.now())

    coupon = db.relationship("Coupon", back_populates="usages")

    def as_api(self):
        return {
            "id": self.id,
            "coupon_id": self.coupon_id,
            "user_id": self.user_id,
            "order_id": self.order_id,
            "discount_amount": float(self.discount_amount or 0),
        }
