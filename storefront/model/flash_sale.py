# storefront/model/flash_sale.py
from ..extensions import db
from sqlalchemy.sql import func

FLASH_SALE_DRAFT = "draft"
FLASH_SALE_UPCOMING = "upcoming"
FLASH_SALE_ACTIVE = "active"
FLASH_SALE_ENDED = "ended"
FLASH_SALE_CANCELLED = "cancelled"


class FlashSale(db.Model):
    __tablename__ = "flash_sales"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    status = db.Column(db.String(16), nullable=False, default=FLASH_SALE_UPCOMING, index=True)

    # naive UTC
    start_time = db.Column(db.DateTime, nullable=False)
    end_time = db.Column(db.DateTime, nullable=False)

    created_at = db.Column(db.DateTime, server_default=func.now())

    products = db.relationship(
        "FlashSaleProduct",
        back_populates="flash_sale",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="FlashSaleProduct.id.asc()",
    )


class FlashSaleProduct(db.Model):
    __tablename__ = "flash_sale_products"

    id = db.Column(db.Integer, primary_key=True)
    flash_sale_id = db.Column(db.Integer, db.ForeignKey("flash_sales.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False, index=True)

    flash_sale_price = db.Column(db.Numeric(12, 2), nullable=False)
    flash_sale_stock = db.Column(db.Integer, nullable=False, default=0)
    sold_count = db.Column(db.Integer, default=0)

    flash_sale = db.relationship("FlashSale", back_populates="products")
