"""
Data types shared by providers, the orchestrator and the estimation store.

- Dimensions: length/width/height in inches
- RawProduct: whatever a single extraction provider managed to read
- Estimation: weight/dimensions inferred from previously stored products
- Product: the normalized record returned to callers
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Optional

# Scraping method tags that are not provider names
METHOD_CACHE = "cache"
METHOD_FALLBACK = "fallback"
METHOD_ERROR_FALLBACK = "error_fallback"

# Names providers return when they found a page but no title
PLACEHOLDER_NAMES = {
    "unknown product",
    "product name not found",
}


@dataclass(frozen=True)
class Dimensions:
    """Package dimensions in inches."""

    length: float
    width: float
    height: float

    @property
    def volume(self) -> float:
        return self.length * self.width * self.height

    def is_valid(self) -> bool:
        return self.length > 0 and self.width > 0 and self.height > 0

    def to_dict(self) -> Dict[str, float]:
        return {"length": self.length, "width": self.width, "height": self.height}

    @classmethod
    def from_values(cls, length, width, height) -> Optional[Dimensions]:
        """Build dimensions from possibly-missing values; None unless all are positive."""
        try:
            dims = cls(float(length), float(width), float(height))
        except (TypeError, ValueError):
            return None
        return dims if dims.is_valid() else None


@dataclass
class RawProduct:
    """Product fields as returned by one extraction provider."""

    name: Optional[str] = None
    price: Optional[Decimal] = None
    image: Optional[str] = None
    weight: Optional[float] = None
    dimensions: Optional[Dimensions] = None
    brand: Optional[str] = None
    category: Optional[str] = None
    in_stock: bool = True
    description: Optional[str] = None

    @property
    def has_name(self) -> bool:
        """True when the provider extracted a real product name."""
        if not self.name or not self.name.strip():
            return False
        return self.name.strip().lower() not in PLACEHOLDER_NAMES


@dataclass
class Estimation:
    """Weight and dimensions inferred from similar stored products."""

    weight: Optional[float]
    dimensions: Optional[Dimensions]
    confidence: float
    source: str


@dataclass
class Product:
    """
    Normalized product record.

    shipping_cost and category are always set on records returned by the
    orchestrator. price stays None when no real price was extracted, even
    though shipping was computed with a default estimate.
    """

    url: str
    name: str
    retailer: str
    category: str
    shipping_cost: Decimal
    scraping_method: str
    price: Optional[Decimal] = None
    image: Optional[str] = None
    weight: Optional[float] = None
    dimensions: Optional[Dimensions] = None
    brand: Optional[str] = None
    in_stock: bool = True
    confidence: float = 0.0
    needs_price_confirmation: bool = True
    estimation_source: Optional[str] = None
    times_seen: int = 0
    confirmed: bool = False
    weight_estimated: bool = False
    dimensions_estimated: bool = False

    @property
    def is_fallback(self) -> bool:
        return self.scraping_method in (METHOD_FALLBACK, METHOD_ERROR_FALLBACK)

    @property
    def attributes_estimated(self) -> bool:
        return self.weight_estimated or self.dimensions_estimated

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert product to a JSON-serializable dictionary.

        Money values are rendered as strings to keep cents exact. Landed
        pricing uses the extracted price, or the default estimate when the
        price still needs confirmation.
        """
        from calculator.services.shipping import calculate_landed_price

        landed = calculate_landed_price(self.price, self.shipping_cost)

        return {
            "url": self.url,
            "name": self.name,
            "price": str(self.price) if self.price is not None else None,
            "image": self.image,
            "retailer": self.retailer,
            "category": self.category,
            "weight": self.weight,
            "dimensions": self.dimensions.to_dict() if self.dimensions else None,
            "brand": self.brand,
            "in_stock": self.in_stock,
            "shipping_cost": str(self.shipping_cost),
            "landed_pricing": {key: str(value) for key, value in landed.items()},
            "scraping_method": self.scraping_method,
            "confidence": round(self.confidence, 2),
            "needs_price_confirmation": self.needs_price_confirmation,
            "estimation_source": self.estimation_source,
        }
