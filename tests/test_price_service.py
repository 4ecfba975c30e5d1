from datetime import timedelta
from decimal import Decimal

import pytest

from storefront.errors import Ineligible, InvalidArgument, NotFound
from storefront.model.flash_sale import FLASH_SALE_UPCOMING
from storefront.services.price_service import (
    DISCOUNT_BULK,
    DISCOUNT_COUPON,
    DISCOUNT_FLASH_SALE,
    DISCOUNT_NONE,
    DISCOUNT_RESELLER,
    PriceRequest,
    apply_coupon_to_quote,
    bulk_discount_percent,
    calculate,
    calculate_price,
    reseller_discount_percent,
)


class TestTierTables:
    @pytest.mark.parametrize("qty,expected", [
        (1, 0), (4, 0), (5, 5), (9, 5), (10, 10), (500, 10),
    ])
    def test_bulk_discount_steps(self, qty, expected):
        assert bulk_discount_percent(qty) == expected

    @pytest.mark.parametrize("qty,expected", [
        (1, 5), (4, 5), (5, 10), (9, 10), (10, 15), (19, 15),
        (20, 20), (49, 20), (50, 25), (99, 25), (100, 30), (1000, 30),
    ])
    def test_reseller_discount_steps(self, qty, expected):
        assert reseller_discount_percent(qty) == expected

    def test_tiers_never_decrease(self):
        for table in (bulk_discount_percent, reseller_discount_percent):
            percents = [table(q) for q in range(1, 150)]
            assert percents == sorted(percents)


class TestCalculatePrice:
    def test_reseller_twenty_units_gets_twenty_percent(self, make_product):
        product = make_product(price=100000)

        quote = calculate_price(product.id, 20, "reseller")

        assert quote.discount_type == DISCOUNT_RESELLER
        assert quote.unit_price == Decimal("80000")
        assert quote.final_price == Decimal("1600000")
        assert quote.base_price == Decimal("2000000")
        assert quote.savings == Decimal("400000")

    def test_reseller_single_unit_still_discounted(self, make_product):
        product = make_product(price=100000)
        quote = calculate_price(product.id, 1, "reseller")
        assert quote.unit_price == Decimal("95000")
        assert quote.discount_type == DISCOUNT_RESELLER

    def test_retail_below_bulk_threshold_has_no_discount(self, make_product):
        product = make_product(price=100000)
        quote = calculate_price(product.id, 4, "retail")
        assert quote.discount_type == DISCOUNT_NONE
        assert quote.final_price == Decimal("400000")
        assert quote.savings == Decimal("0")

    def test_retail_bulk_is_a_cliff_on_the_whole_quantity(self, make_product):
        product = make_product(price=100000)

        five = calculate_price(product.id, 5, "retail")
        ten = calculate_price(product.id, 10, "retail")

        assert five.discount_type == DISCOUNT_BULK
        assert five.unit_price == Decimal("95000")
        assert ten.unit_price == Decimal("90000")
        assert ten.final_price == Decimal("900000")

    def test_flash_sale_wins_for_retail(self, make_product, make_flash_sale):
        product = make_product(price=100000)
        sale = make_flash_sale([(product, 50000)])

        quote = calculate_price(product.id, 1, "retail")

        assert quote.discount_type == DISCOUNT_FLASH_SALE
        assert quote.flash_sale_active is True
        assert quote.final_price == Decimal("50000")
        assert quote.discount == Decimal("50000")
        assert quote.flash_sale_end.endswith("Z")
        assert quote.flash_sale_end.startswith(sale.end_time.strftime("%Y-%m-%dT%H:%M:%S"))

    def test_flash_sale_wins_over_reseller_tiering(self, make_product, make_flash_sale):
        product = make_product(price=100000)
        make_flash_sale([(product, 85000)])

        quote = calculate_price(product.id, 100, "reseller")

        assert quote.discount_type == DISCOUNT_FLASH_SALE
        assert quote.unit_price == Decimal("85000")

    def test_future_flash_sale_is_ignored(self, make_product, make_flash_sale, now):
        product = make_product(price=100000)
        make_flash_sale([(product, 50000)], start=now + timedelta(hours=1), end=now + timedelta(hours=2))

        quote = calculate_price(product.id, 1, "retail", now=now)

        assert quote.discount_type == DISCOUNT_NONE
        assert quote.flash_sale_end is None

    def test_variant_price_supersedes_product_price(self, make_product, make_variant):
        product = make_product(price=100000)
        variant = make_variant(product, price=120000)

        quote = calculate_price(product.id, 5, "retail", variant_id=variant.id)

        assert quote.original_price == Decimal("120000")
        assert quote.unit_price == Decimal("114000")
        assert quote.variant_id == variant.id

    def test_variant_without_price_uses_product_price(self, make_product, make_variant):
        product = make_product(price=100000)
        variant = make_variant(product)
        assert calculate_price(product.id, 1, "retail", variant_id=variant.id).original_price == Decimal("100000")

    def test_variant_of_another_product_is_rejected(self, make_product, make_variant):
        product = make_product(price=100000, slug="a")
        other = make_product(price=50000, slug="b")
        variant = make_variant(other, price=60000)

        with pytest.raises(InvalidArgument):
            calculate_price(product.id, 1, "retail", variant_id=variant.id)

    @pytest.mark.parametrize("qty", [0, -3])
    def test_non_positive_quantity_is_rejected(self, make_product, qty):
        product = make_product()
        with pytest.raises(InvalidArgument):
            calculate_price(product.id, qty, "retail")

    def test_unknown_customer_type_is_rejected(self, make_product):
        product = make_product()
        with pytest.raises(InvalidArgument):
            calculate_price(product.id, 1, "wholesale")

    def test_missing_product_and_variant(self, app, make_product):
        with pytest.raises(NotFound):
            calculate_price(999, 1, "retail")
        product = make_product()
        with pytest.raises(NotFound):
            calculate_price(product.id, 1, "retail", variant_id=999)

    def test_calculate_accepts_request_object(self, make_product):
        product = make_product(price=100000)
        quote = calculate(PriceRequest(product_id=product.id, quantity=10, customer_type="reseller"))
        assert quote.unit_price == Decimal("85000")

    def test_as_api_emits_floats(self, make_product):
        product = make_product(price=100000)
        payload = calculate_price(product.id, 20, "reseller").as_api()
        assert payload["final_price"] == 1600000.0
        assert payload["discount_type"] == "reseller"

    def test_upcoming_sale_status_does_not_count(self, make_product, make_flash_sale):
        product = make_product(price=100000)
        make_flash_sale([(product, 50000)], status=FLASH_SALE_UPCOMING)
        assert calculate_price(product.id, 1, "retail").discount_type == DISCOUNT_NONE


class TestApplyCouponToQuote:
    def test_coupon_overwrites_discount_type(self, make_product, make_coupon):
        product = make_product(price=100000)
        make_coupon(code="FLAT5K", ctype="fixed", value=5000)
        quote = calculate_price(product.id, 1, "retail")

        quoted = apply_coupon_to_quote(quote, "FLAT5K", user_id=1)

        assert quoted.discount_type == DISCOUNT_COUPON
        assert quoted.coupon_applied is True
        assert quoted.coupon_discount == Decimal("5000")
        assert quoted.final_price == Decimal("95000")
        assert quote.final_price == Decimal("100000")

    def test_ineligible_coupon_propagates(self, make_product, make_coupon):
        product = make_product(price=100000)
        make_coupon(code="BIG", min_purchase=200000)
        quote = calculate_price(product.id, 1, "retail")

        with pytest.raises(Ineligible):
            apply_coupon_to_quote(quote, "BIG", user_id=1)
