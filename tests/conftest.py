"""
Shared pytest fixtures.

Every test gets a fresh app bound to an in-memory SQLite database, plus
small factories for the rows the pricing engine reads.
"""

from datetime import timedelta

import pytest

from storefront import create_app
from storefront.config import TestConfig
from storefront.extensions import db
from storefront.model import (
    Coupon,
    FlashSale,
    FlashSaleProduct,
    Product,
    ProductVariant,
    ShippingZone,
)
from storefront.model.flash_sale import FLASH_SALE_ACTIVE
from storefront.utils.parsing import utcnow


# ============================================================================
# APP FIXTURES
# ============================================================================


@pytest.fixture
def app():
    app = create_app(TestConfig)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def runner(app):
    return app.test_cli_runner()


@pytest.fixture
def now():
    return utcnow()


# ============================================================================
# ROW FACTORIES
# ============================================================================


@pytest.fixture
def make_product(app):
    def _make(price=100000, weight=0.5, name="Canvas Tote", **kw):
        product = Product(name=name, price=price, weight=weight, **kw)
        db.session.add(product)
        db.session.commit()
        return product
    return _make


@pytest.fixture
def make_variant(app):
    def _make(product, price=None, name="Default", **kw):
        variant = ProductVariant(product_id=product.id, name=name, price=price, **kw)
        db.session.add(variant)
        db.session.commit()
        return variant
    return _make


@pytest.fixture
def make_flash_sale(app, now):
    def _make(products, status=FLASH_SALE_ACTIVE, start=None, end=None, name="Flash"):
        """`products` is a list of (product, sale_price) pairs."""
        sale = FlashSale(
            name=name,
            status=status,
            start_time=start or now - timedelta(hours=1),
            end_time=end or now + timedelta(hours=1),
        )
        for product, price in products:
            sale.products.append(FlashSaleProduct(product_id=product.id, flash_sale_price=price, flash_sale_stock=10))
        db.session.add(sale)
        db.session.commit()
        return sale
    return _make


@pytest.fixture
def make_coupon(app):
    def _make(code="SAVE10", ctype="percentage", value=10, **kw):
        coupon = Coupon(code=code, name=kw.pop("name", code), ctype=ctype, value=value, **kw)
        db.session.add(coupon)
        db.session.commit()
        return coupon
    return _make


@pytest.fixture
def make_zone(app):
    def _make(regions, name="Zone", **kw):
        zone = ShippingZone(name=name, regions=regions, **kw)
        db.session.add(zone)
        db.session.commit()
        return zone
    return _make
