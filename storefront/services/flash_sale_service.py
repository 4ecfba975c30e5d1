# storefront/services/flash_sale_service.py
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from ..errors import UpstreamFailure
from ..model import FlashSale, FlashSaleProduct
from ..model.flash_sale import FLASH_SALE_ACTIVE
from ..utils.money import D
from ..utils.parsing import utcnow


@dataclass(frozen=True)
class FlashSaleOverride:
    flash_sale_id: int
    price: Decimal
    ends_at: datetime


def list_active_sales():
    """Sales flagged active by status, in id order. Time window is not checked here."""
    try:
        return FlashSale.query.filter(FlashSale.status == FLASH_SALE_ACTIVE).order_by(FlashSale.id.asc()).all()
    except SQLAlchemyError as e:
        raise UpstreamFailure("flash sale lookup failed") from e

def list_sale_products(flash_sale_id):
    try:
        return (
            FlashSaleProduct.query
            .filter(FlashSaleProduct.flash_sale_id == flash_sale_id)
            .order_by(FlashSaleProduct.id.asc())
            .all()
        )
    except SQLAlchemyError as e:
        raise UpstreamFailure("flash sale lookup failed") from e

def is_sale_live(sale: FlashSale, now: datetime) -> bool:
    # status can lag the clock, so both must hold
    if sale.status != FLASH_SALE_ACTIVE:
        return False
    return sale.start_time <= now <= sale.end_time

def active_override(product_id, now: datetime | None = None) -> FlashSaleOverride | None:
    """
    Override price for `product_id` from the first live sale that enrolls it.

    A product enrolled in several live sales gets the lowest sale id; no
    further tie-break is applied. A non-positive price on that match means
    no override at all.
    """
    now = now or utcnow()
    for sale in list_active_sales():
        if not is_sale_live(sale, now):
            continue
        if not any(p.product_id == product_id for p in sale.products):
            continue
        for row in list_sale_products(sale.id):
            if row.product_id != product_id:
                continue
            price = D(row.flash_sale_price)
            if price <= 0:
                current_app.logger.warning(
                    "flash sale %s lists product %s with non-positive price %s; ignored",
                    sale.id, product_id, price,
                )
                return None
            return FlashSaleOverride(flash_sale_id=sale.id, price=price, ends_at=sale.end_time)
    return None
