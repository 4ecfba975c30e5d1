# storefront/cli.py
from datetime import timedelta

import click
from flask.cli import with_appcontext
import pandas as pd

from .extensions import db
from .model import Product, ProductVariant, FlashSale, FlashSaleProduct, Coupon, ShippingZone
from .model.coupon import COUPON_FIXED, COUPON_PERCENTAGE
from .model.flash_sale import FLASH_SALE_ACTIVE
from .services.coupon_service import CUSTOMER_RESELLER, CUSTOMER_RETAIL
from .services.price_service import RESELLER_TIERS, RETAIL_BULK_TIERS, calculate_price
from .utils.money import to_float_money
from .utils.parsing import utcnow

DEMO_PRODUCTS = [
    {"name": "Canvas Tote", "slug": "canvas-tote", "category": "bags", "price": 100000, "weight": 0.5},
    {"name": "Enamel Pin", "slug": "enamel-pin", "category": "accessories", "price": 25000, "weight": 0.05},
    {"name": "Cotton Tee", "slug": "cotton-tee", "category": "apparel", "price": 120000, "weight": 0.25},
]

DEMO_COUPONS = [
    {"code": "WELCOME10", "name": "Welcome 10%", "ctype": COUPON_PERCENTAGE, "value": 10, "max_discount": 50000,
     "max_uses_per_user": 1},
    {"code": "HEMAT20K", "name": "Hemat 20rb", "ctype": COUPON_FIXED, "value": 20000, "min_purchase": 150000,
     "max_uses": 100, "for_reseller": True},
]


def price_breakpoints():
    """Every quantity at which some tier starts, ascending."""
    return sorted({1} | {q for q, _ in RESELLER_TIERS} | {q for q, _ in RETAIL_BULK_TIERS})


@click.command("seed-demo")
@with_appcontext
def seed_demo():
    if Product.query.first():
        click.echo("Catalog is not empty; skipping"); return

    products = [Product(**p) for p in DEMO_PRODUCTS]
    db.session.add_all(products)
    db.session.flush()

    tee = products[2]
    db.session.add_all([
        ProductVariant(product_id=tee.id, name="M - Black", size="M", color="black", sku="TEE-M-BLK", stock=40),
        ProductVariant(product_id=tee.id, name="XL - Black", size="XL", color="black", sku="TEE-XL-BLK",
                       price=135000, stock=15),
    ])

    now = utcnow()
    sale = FlashSale(name="Demo Flash Sale", status=FLASH_SALE_ACTIVE,
                     start_time=now - timedelta(hours=1), end_time=now + timedelta(days=1))
    sale.products.append(FlashSaleProduct(product_id=products[1].id, flash_sale_price=15000, flash_sale_stock=50))
    db.session.add(sale)

    db.session.add_all([Coupon(**c) for c in DEMO_COUPONS])
    db.session.add(ShippingZone(
        name="Jabodetabek",
        regions=["ID-JK", "ID-JB", "ID-BT"],
        exclude_regions=["ID-JB-BGR"],
        free_shipping_enabled=True,
        free_shipping_threshold=300000,
        handling_fee=2000,
    ))
    db.session.commit()
    click.echo(f"Seeded {len(products)} products, 1 flash sale, {len(DEMO_COUPONS)} coupons, 1 shipping zone")


@click.command("export-price-list")
@click.option("--output", "output", required=True, type=click.Path(dir_okay=False, writable=True))
@with_appcontext
def export_price_list(output):
    """Unit prices per product at every tier breakpoint, as CSV."""
    rows = []
    for product in Product.query.order_by(Product.id.asc()).all():
        for qty in price_breakpoints():
            retail = calculate_price(product.id, qty, CUSTOMER_RETAIL)
            reseller = calculate_price(product.id, qty, CUSTOMER_RESELLER)
            rows.append({
                "Product ID": product.id,
                "Name": product.name,
                "Quantity": qty,
                "Base Price": to_float_money(retail.original_price),
                "Retail Unit Price": to_float_money(retail.unit_price),
                "Retail Discount": retail.discount_type,
                "Reseller Unit Price": to_float_money(reseller.unit_price),
                "Reseller Discount": reseller.discount_type,
            })

    df = pd.DataFrame(rows, columns=[
        "Product ID", "Name", "Quantity", "Base Price",
        "Retail Unit Price", "Retail Discount", "Reseller Unit Price", "Reseller Discount",
    ])
    df.to_csv(output, index=False)
    click.echo(f"Exported {len(df)} price rows to {output}")


def register_cli(app):
    app.cli.add_command(seed_demo)
    app.cli.add_command(export_price_list)
