# storefront/model/product.py
from ..extensions import db
from sqlalchemy.sql import func


class Product(db.Model):
    __tablename__ = "products"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False, index=True)
    slug = db.Column(db.String(200), unique=True, index=True)
    category = db.Column(db.String(50), nullable=False, default="accessories")

    price = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    weight = db.Column(db.Float, nullable=False, default=0.0)   # kg

    created_at = db.Column(db.DateTime, server_default=func.now())
    updated_at = db.Column(db.DateTime, onupdate=func.now(), server_default=func.now())

    variants = db.relationship(
        "ProductVariant",
        back_populates="product",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="ProductVariant.id.asc()",
    )

    def as_api(self):
        return {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "category": self.category,
            "price": float(self.price or 0),
            "weight": self.weight,
            "variants": [v.as_api() for v in self.variants],
        }


class ProductVariant(db.Model):
    __tablename__ = "product_variants"

    id = db.Column(db.Integer, primary_key=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False, index=True)
    name = db.Column(db.String(100), nullable=False)         # e.g. "Small - Red"
    size = db.Column(db.String(50))
    color = db.Column(db.String(50))

    # when set, supersedes the product price
    price = db.Column(db.Numeric(12, 2), nullable=True)
    stock = db.Column(db.Integer, default=0)
    sku = db.Column(db.String(100), unique=True, index=True)

    product = db.relationship("Product", back_populates="variants")

    def as_api(self):
        return {
            "id": self.id,
            "product_id": self.product_id,
            "name": self.name,
            "size": self.size,
            "color": self.color,
            "price": float(self.price) if self.price is not None else None,
            "stock": self.stock,
            "sku": self.sku,
        }
