"""
Shipping cost estimation for Bermuda ocean freight.

estimate_shipping_cost is a pure function: base cost scaled by category,
plus a per-pound charge, a dimensional-weight surcharge for bulky items
and a value-protection surcharge for expensive ones, rounded to cents and
clamped to the configured floor/ceiling.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Optional, Union

from django.conf import settings

from calculator.models import Category
from calculator.services.types import Dimensions

Number = Union[Decimal, float, int, str]

CENTS = Decimal("0.01")

BASE_COST = Decimal("15.00")
PER_POUND_RATE = Decimal("2.50")
DIM_WEIGHT_DIVISOR = Decimal("166")
DIM_EXCESS_RATE = Decimal("1.50")
HIGH_VALUE_THRESHOLD = Decimal("100")
HIGH_VALUE_RATE = Decimal("0.05")
HIGH_VALUE_CAP = Decimal("50")
ESTIMATED_WEIGHT_PER_DOLLAR = Decimal("0.02")

CATEGORY_MULTIPLIERS: Dict[str, Decimal] = {
    Category.FURNITURE.value: Decimal("2.5"),
    Category.ELECTRONICS.value: Decimal("1.8"),
    Category.HOME_GARDEN.value: Decimal("1.5"),
    Category.KITCHEN_DINING.value: Decimal("1.7"),
    Category.SPORTS_OUTDOORS.value: Decimal("2.0"),
    Category.TOOLS_HARDWARE.value: Decimal("1.6"),
    Category.GENERAL.value: Decimal("1.0"),
    Category.CLOTHING.value: Decimal("0.8"),
    Category.BEAUTY.value: Decimal("0.7"),
    Category.BOOKS_MEDIA.value: Decimal("0.9"),
    Category.TOYS_GAMES.value: Decimal("1.2"),
}


def _to_decimal(value: Number) -> Decimal:
    return value if isinstance(value, Decimal) else Decimal(str(value))


def default_price_estimate() -> Decimal:
    return _to_decimal(getattr(settings, "CALCULATOR_DEFAULT_PRICE_ESTIMATE", "50.00"))


def shipping_bounds() -> tuple:
    """Return the (floor, ceiling) shipping cost range from settings."""
    floor = _to_decimal(getattr(settings, "CALCULATOR_SHIPPING_COST_FLOOR", "10.00"))
    ceiling = _to_decimal(getattr(settings, "CALCULATOR_SHIPPING_COST_CEILING", "2500.00"))
    return floor, ceiling


def estimate_shipping_cost(
    category: str,
    weight: Optional[Number],
    price: Optional[Number],
    dimensions: Optional[Dimensions] = None,
) -> Decimal:
    """
    Estimate the cost of shipping one item to Bermuda.

    Args:
        category: Merchandise category (unknown categories use multiplier 1.0)
        weight: Actual weight in pounds, or None when unknown
        price: Item price, or None to use the default price estimate
        dimensions: Package dimensions in inches, or None

    Returns:
        Shipping cost in dollars, rounded to cents and clamped to the
        configured floor and ceiling
    """
    multiplier = CATEGORY_MULTIPLIERS.get(str(category), Decimal("1.0"))
    price_value = _to_decimal(price) if price is not None else default_price_estimate()
    if price_value < 0:
        price_value = Decimal("0")

    cost = BASE_COST * multiplier

    if weight is not None and _to_decimal(weight) > 0:
        billable_weight = _to_decimal(weight)
    else:
        billable_weight = max(Decimal("1"), price_value * ESTIMATED_WEIGHT_PER_DOLLAR * multiplier)
    cost += billable_weight * PER_POUND_RATE

    if dimensions is not None and dimensions.is_valid():
        dim_weight = _to_decimal(dimensions.volume) / DIM_WEIGHT_DIVISOR
        if dim_weight > billable_weight:
            cost += (dim_weight - billable_weight) * DIM_EXCESS_RATE

    if price_value > HIGH_VALUE_THRESHOLD:
        cost += min(price_value * HIGH_VALUE_RATE, HIGH_VALUE_CAP)

    floor, ceiling = shipping_bounds()
    # clamp first: quantizing a huge cost exceeds Decimal precision
    cost = min(max(cost, floor), ceiling)
    return cost.quantize(CENTS, rounding=ROUND_HALF_UP)


def calculate_landed_price(
    price: Optional[Number],
    shipping_cost: Number,
) -> Dict[str, Decimal]:
    """
    Break down the landed price of an item: price + shipping + margin.

    Args:
        price: Item price, or None to use the default price estimate
        shipping_cost: Shipping cost from estimate_shipping_cost

    Returns:
        Dict with product_price, shipping_cost, subtotal, margin, landed_price
    """
    product_price = _to_decimal(price) if price is not None else default_price_estimate()
    shipping = _to_decimal(shipping_cost)
    margin_rate = _to_decimal(getattr(settings, "CALCULATOR_LANDED_MARGIN_RATE", "0.25"))

    subtotal = product_price + shipping
    margin = (subtotal * margin_rate).quantize(CENTS, rounding=ROUND_HALF_UP)

    return {
        "product_price": product_price.quantize(CENTS, rounding=ROUND_HALF_UP),
        "shipping_cost": shipping.quantize(CENTS, rounding=ROUND_HALF_UP),
        "subtotal": subtotal.quantize(CENTS, rounding=ROUND_HALF_UP),
        "margin": margin,
        "landed_price": (subtotal + margin).quantize(CENTS, rounding=ROUND_HALF_UP),
    }
