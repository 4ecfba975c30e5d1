# storefront/services/catalog_service.py
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..errors import NotFound, UpstreamFailure
from ..model import Product, ProductVariant


def get_product(product_id) -> Product:
    try:
        product = db.session.get(Product, product_id)
    except SQLAlchemyError as e:
        raise UpstreamFailure("catalog lookup failed") from e
    if product is None:
        raise NotFound(f"product {product_id} not found")
    return product

def get_variant(variant_id) -> ProductVariant:
    try:
        variant = db.session.get(ProductVariant, variant_id)
    except SQLAlchemyError as e:
        raise UpstreamFailure("catalog lookup failed") from e
    if variant is None:
        raise NotFound(f"variant {variant_id} not found")
    return variant
