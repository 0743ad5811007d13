"""
Tests for shipping cost estimation and landed pricing.
"""

from decimal import Decimal

import pytest

from calculator.services.shipping import (
    CATEGORY_MULTIPLIERS,
    calculate_landed_price,
    estimate_shipping_cost,
)
from calculator.services.types import Dimensions


class TestEstimateShippingCost:
    """Tests for estimate_shipping_cost."""

    def test_known_weight_with_high_value_surcharge(self):
        # 15 * 2.5 + 50 * 2.5 + min(300 * 0.05, 50)
        assert estimate_shipping_cost("Furniture", 50, Decimal("300")) == Decimal("177.50")

    def test_unknown_weight_and_price_use_defaults(self):
        # 15 + max(1, 50 * 0.02 * 1.0) * 2.5
        assert estimate_shipping_cost("General Merchandise", None, None) == Decimal("17.50")

    def test_unknown_weight_estimated_from_price(self):
        # 15 * 1.8 + (400 * 0.02 * 1.8) * 2.5 + 20
        assert estimate_shipping_cost("Electronics", None, Decimal("400")) == Decimal("83.00")

    def test_dimensional_weight_excess(self):
        # 24x18x12 / 166 = 31.23 lb dim weight vs 10 lb actual
        cost = estimate_shipping_cost("Electronics", 10, Decimal("200"), Dimensions(24, 18, 12))
        assert cost == Decimal("93.84")

    def test_dimensions_below_actual_weight_add_nothing(self):
        small = Dimensions(5, 5, 5)
        assert estimate_shipping_cost("Furniture", 50, Decimal("300"), small) == Decimal("177.50")

    def test_high_value_surcharge_is_capped(self):
        # 15 + 2.5 + 50
        assert estimate_shipping_cost("General Merchandise", 1, Decimal("5000")) == Decimal("67.50")

    def test_unknown_category_uses_multiplier_one(self):
        assert estimate_shipping_cost("Spaceships", 1, Decimal("50")) == Decimal("17.50")

    def test_ceiling(self):
        assert estimate_shipping_cost("Furniture", 2000, Decimal("100")) == Decimal("2500.00")

    def test_floor(self, settings):
        settings.CALCULATOR_SHIPPING_COST_FLOOR = "20.00"
        assert estimate_shipping_cost("Beauty & Personal Care", 1, Decimal("10")) == Decimal("20.00")

    def test_deterministic_and_bounded(self):
        weights = [None, 0.5, 5, 50, 500]
        prices = [None, Decimal("0"), Decimal("19.99"), Decimal("150"), Decimal("9999")]
        dims = [None, Dimensions(10, 10, 10), Dimensions(80, 40, 40)]

        for category in CATEGORY_MULTIPLIERS:
            for weight in weights:
                for price in prices:
                    for dim in dims:
                        first = estimate_shipping_cost(category, weight, price, dim)
                        assert first == estimate_shipping_cost(category, weight, price, dim)
                        assert Decimal("10.00") <= first <= Decimal("2500.00")
                        assert first == first.quantize(Decimal("0.01"))


    @pytest.mark.parametrize(
        "weight, price, dimensions",
        [
            (1e27, Decimal("50"), None),
            (1e27, Decimal("1e30"), Dimensions(1e12, 1e12, 1e12)),
            (None, Decimal("1e40"), None),
        ],
    )
    def test_extreme_inputs_are_clamped(self, weight, price, dimensions):
        assert estimate_shipping_cost("Furniture", weight, price, dimensions) == Decimal("2500.00")

class TestCalculateLandedPrice:
    """Tests for calculate_landed_price."""

    def test_breakdown(self):
        landed = calculate_landed_price(Decimal("100"), Decimal("20"))

        assert landed == {
            "product_price": Decimal("100.00"),
            "shipping_cost": Decimal("20.00"),
            "subtotal": Decimal("120.00"),
            "margin": Decimal("30.00"),
            "landed_price": Decimal("150.00"),
        }

    def test_missing_price_uses_default_estimate(self):
        landed = calculate_landed_price(None, Decimal("17.50"))

        assert landed["product_price"] == Decimal("50.00")
        assert landed["landed_price"] == Decimal("84.38")

    @pytest.mark.parametrize("price", ["19.99", 19.99, 19])
    def test_accepts_numbers_and_strings(self, price):
        landed = calculate_landed_price(price, "10")
        assert landed["subtotal"] == Decimal(str(price)) + Decimal("10")
