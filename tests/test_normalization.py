"""
Tests for price, weight and dimension parsing.
"""

from decimal import Decimal

import pytest

from calculator.services.types import Dimensions
from calculator.utils.normalization import (
    parse_dimensions,
    parse_price,
    parse_weight,
    search_term_from_url,
    simplify_product_name,
)


class TestParsePrice:

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("$1,299.99", Decimal("1299.99")),
            ("12345.67", Decimal("12345.67")),
            ("Now only 49.5 USD", Decimal("49.50")),
            (25, Decimal("25.00")),
            (19.99, Decimal("19.99")),
            (Decimal("7.1"), Decimal("7.10")),
        ],
    )
    def test_parses(self, value, expected):
        assert parse_price(value) == expected

    @pytest.mark.parametrize("value", [None, "", "Out of stock", 0, "-", True])
    def test_rejects(self, value):
        assert parse_price(value) is None


class TestParseWeight:

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("Weight: 12.5 lbs", 12.5),
            ("5 pounds", 5.0),
            ("2 kg", 4.4),
            ("500 g", 1.1),
            ("32 oz", 2.0),
            ("7", 7.0),
            (3, 3.0),
        ],
    )
    def test_converts_to_pounds(self, text, expected):
        assert parse_weight(text) == expected

    @pytest.mark.parametrize("text", [None, "", "heavy", "0.05 lb", "900 lbs"])
    def test_rejects_missing_or_implausible(self, text):
        assert parse_weight(text) is None


class TestParseDimensions:

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("Dimensions: 10 x 8 x 2 inches", Dimensions(10, 8, 2)),
            ("24.5×18×12", Dimensions(24.5, 18, 12)),
            ('30"W x 20"D x 15"H', Dimensions(30, 20, 15)),
            ("L: 10 in, W: 8 in, H: 2 in", Dimensions(10, 8, 2)),
            ("Length: 40 Width: 20 Height: 30", Dimensions(40, 20, 30)),
        ],
    )
    def test_formats(self, text, expected):
        assert parse_dimensions(text) == expected

    def test_implausible_dimensions_are_rejected(self):
        assert parse_dimensions("1000 x 8 x 2") is None

    def test_no_dimensions(self):
        assert parse_dimensions("A lovely chair") is None
        assert parse_dimensions(None) is None


class TestSearchTerms:

    def test_search_term_from_slug(self):
        url = "https://www.wayfair.com/furniture/pdp/modern-oak-dining-table-w001.html"
        assert search_term_from_url(url) == "modern oak dining table w001.html"

    def test_search_term_default(self):
        assert search_term_from_url("https://www.amazon.com/dp/B08N5WRWNW") == "product"

    def test_simplify_product_name(self):
        name = "Modern Oak Dining Table by Wayfair Brand Inc with Bench"
        assert simplify_product_name(name) == "Modern Oak Dining Table with"

    def test_simplify_strips_retailer_names(self):
        assert simplify_product_name("Amazon Basics Desk Lamp") == "Basics Desk Lamp"
