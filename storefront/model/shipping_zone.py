# storefront/model/shipping_zone.py
from ..extensions import db
from sqlalchemy.sql import func

ZONE_ACTIVE = "active"
ZONE_INACTIVE = "inactive"


class ShippingZone(db.Model):
    __tablename__ = "shipping_zones"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    status = db.Column(db.String(16), nullable=False, default=ZONE_ACTIVE, index=True)

    # region codes, e.g. ["ID-JK", "ID-JB"]; exclusions win over inclusions
    regions = db.Column(db.JSON, nullable=False, default=list)
    exclude_regions = db.Column(db.JSON, nullable=False, default=list)

    free_shipping_enabled = db.Column(db.Boolean, default=False)
    free_shipping_threshold = db.Column(db.Numeric(12, 2), default=0)

    # per-kg base rates by carrier
    jne_base_rate = db.Column(db.Numeric(12, 2), nullable=False, default=15000)
    tiki_base_rate = db.Column(db.Numeric(12, 2), nullable=False, default=16000)
    pos_base_rate = db.Column(db.Numeric(12, 2), nullable=False, default=14000)
    sicepat_base_rate = db.Column(db.Numeric(12, 2), nullable=False, default=13000)

    handling_fee = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    minimum_cost = db.Column(db.Numeric(12, 2), nullable=False, default=9000)

    created_at = db.Column(db.DateTime, server_default=func.now(), index=True)

    def covers(self, region_code: str) -> bool:
        return region_code in (self.regions or []) and region_code not in (self.exclude_regions or [])

    def rate_for(self, carrier: str):
        rates = {
            "jne": self.jne_base_rate,
            "tiki": self.tiki_base_rate,
            "pos": self.pos_base_rate,
            "sicepat": self.sicepat_base_rate,
        }
        return rates.get(carrier, self.jne_base_rate)

    def as_api(self):
        return {
            "id": self.id,
            "name": self.name,
            "status": self.status,
            "regions": list(self.regions or []),
            "exclude_regions": list(self.exclude_regions or []),
            "free_shipping_enabled": bool(self.free_shipping_enabled),
            "free_shipping_threshold": float(self.free_shipping_threshold or 0),
            "handling_fee": float(self.handling_fee or 0),
            "minimum_cost": float(self.minimum_cost or 0),
        }
