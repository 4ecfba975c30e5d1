# ------ storefront/model/__init__.py ------

from .product import Product, ProductVariant
from .flash_sale import FlashSale, FlashSaleProduct
from .coupon import Coupon, CouponUsage
from .shipping_zone import ShippingZone

__all__ = [
    "Product",
    "ProductVariant",
    "FlashSale",
    "FlashSaleProduct",
    "Coupon",
    "CouponUsage",
    "ShippingZone",
]
