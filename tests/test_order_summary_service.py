from decimal import Decimal

import pytest

from storefront.errors import Ineligible, InvalidArgument, NotFound
from storefront.services.order_summary_service import calculate_order_summary, validate_and_apply_coupon
from storefront.services.price_service import PriceRequest
from storefront.services.shipping_service import ShippingItem, ShippingRequest


@pytest.fixture
def catalog(make_product):
    tote = make_product(name="Tote", slug="tote", price=100000, weight=0.5)
    pin = make_product(name="Pin", slug="pin", price=20000, weight=0.1)
    return tote, pin


def _shipping(**kw):
    kw.setdefault("destination", "ID-XX")
    kw.setdefault("shipping_type", "jne")
    return ShippingRequest(**kw)


def test_totals_with_bulk_tax_and_default_shipping(catalog):
    tote, pin = catalog
    items = [PriceRequest(tote.id, 5, "retail"), PriceRequest(pin.id, 1, "retail")]

    summary = calculate_order_summary(items, _shipping(), "retail")

    # tote: 5 x 100000, 5% bulk -> 25000 off; pin: no discount
    assert summary.subtotal == Decimal("520000")
    assert summary.total_discount == Decimal("25000")
    # 2.6 kg x 15000
    assert summary.total_weight == Decimal("2.6")
    assert summary.shipping_cost == Decimal("39000")
    assert summary.tax_amount == Decimal("54450")
    assert summary.total == Decimal("588450")
    assert summary.item_count == 6
    assert len(summary.lines) == 2
    assert summary.coupon_applied is False


def test_explicit_parcels_override_catalog_weight(catalog):
    tote, _ = catalog
    shipping = _shipping(items=[ShippingItem(weight=Decimal("0.1"), quantity=1)])

    summary = calculate_order_summary([PriceRequest(tote.id, 1, "retail")], shipping, "retail")

    assert summary.shipping_cost == Decimal("9000")


def test_coupon_is_validated_against_discounted_subtotal(catalog, make_coupon):
    tote, _ = catalog
    make_coupon(code="MIN500", ctype="fixed", value=50000, min_purchase=500000)
    items = [PriceRequest(tote.id, 5, "retail")]

    # subtotal 500000 but 475000 after bulk discount
    with pytest.raises(Ineligible):
        calculate_order_summary(items, _shipping(), "retail", coupon_code="MIN500", user_id=1)


def test_coupon_discount_is_recorded_separately(catalog, make_coupon):
    tote, _ = catalog
    make_coupon(code="TEN", value=10, max_discount=30000)
    items = [PriceRequest(tote.id, 5, "retail")]

    plain = calculate_order_summary(items, _shipping(), "retail")
    summary = calculate_order_summary(items, _shipping(), "retail", coupon_code="TEN", user_id=1)

    assert summary.coupon_applied is True
    assert summary.coupon_code == "TEN"
    assert summary.coupon_discount == Decimal("30000")
    assert summary.total_discount == plain.total_discount
    assert summary.tax_amount == plain.tax_amount
    assert summary.total == plain.total - Decimal("30000")


def test_validate_and_apply_coupon_on_existing_summary(catalog, make_coupon):
    tote, _ = catalog
    make_coupon(code="FLAT", ctype="fixed", value=10000)
    summary = calculate_order_summary([PriceRequest(tote.id, 1, "retail")], _shipping(), "retail")

    applied = validate_and_apply_coupon(summary, "FLAT", user_id=3)

    assert applied.total == summary.total - Decimal("10000")
    assert summary.coupon_applied is False


def test_first_failing_line_aborts(catalog):
    tote, _ = catalog
    items = [PriceRequest(999, 1, "retail"), PriceRequest(tote.id, 0, "retail")]

    with pytest.raises(NotFound):
        calculate_order_summary(items, _shipping(), "retail")


def test_empty_order(app):
    with pytest.raises(InvalidArgument):
        calculate_order_summary([], _shipping(), "retail")


def test_as_api_lists_line_quotes(catalog):
    tote, pin = catalog
    summary = calculate_order_summary([PriceRequest(pin.id, 2, "reseller")], _shipping(), "reseller")

    payload = summary.as_api()

    assert payload["items"][0]["discount_type"] == "reseller"
    assert payload["subtotal"] == 40000.0
    assert payload["total_discount"] == 2000.0
