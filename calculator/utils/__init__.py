"""
Utility functions for the calculator application.

- normalization.py: price, weight and dimension parsing from free text
"""

from .normalization import (
    parse_price,
    parse_weight,
    parse_dimensions,
    search_term_from_url,
    simplify_product_name,
)

__all__ = [
    "parse_price",
    "parse_weight",
    "parse_dimensions",
    "search_term_from_url",
    "simplify_product_name",
]
