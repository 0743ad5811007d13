"""
Learning rules shared by every ProductStore backend.

These are pure functions over Product records so the database and
in-memory stores apply identical semantics:

- score_confidence: 0.3 base + 0.2 name + 0.2 price + 0.2 dimensions + 0.1 weight
- merge_for_save: upsert rules (confidence never decreases, fallback saves
  keep stored fields, extracted attributes beat estimated ones)
- trimmed_mean: outlier-resistant average used by both estimation tiers
- estimate_from_similar / estimate_from_pattern: the two estimation tiers
"""

import math
from dataclasses import replace
from typing import Dict, Iterable, List, Optional

from calculator.services.types import Dimensions, Estimation, Product, PLACEHOLDER_NAMES

BASE_CONFIDENCE = 0.3
NAME_CONFIDENCE = 0.2
PRICE_CONFIDENCE = 0.2
DIMENSIONS_CONFIDENCE = 0.2
WEIGHT_CONFIDENCE = 0.1
CONFIRMED_CONFIDENCE = 1.0
HIT_CONFIDENCE_STEP = 0.05

TRIM_MIN_SAMPLES = 5
TRIM_FRACTION = 0.2

SIMILAR_PRODUCTS_LIMIT = 10
SIMILAR_MIN_CONFIDENCE = 0.6
SIMILAR_MIN_SAMPLES = 3
PATTERN_MIN_SAMPLES = 5

SOURCE_SIMILAR_PRODUCTS = "similar_products"
SOURCE_CATEGORY_PATTERNS = "category_patterns"

FALLBACK_NAME_PREFIX = "Product from "


def has_real_name(product: Product) -> bool:
    """True unless the name is empty, a placeholder or a generated fallback name."""
    name = (product.name or "").strip()
    if not name or name.lower() in PLACEHOLDER_NAMES:
        return False
    return not (product.is_fallback or name.startswith(FALLBACK_NAME_PREFIX))


def has_extracted_weight(product: Product) -> bool:
    return product.weight is not None and product.weight > 0 and not product.weight_estimated


def has_extracted_dimensions(product: Product) -> bool:
    return (
        product.dimensions is not None
        and product.dimensions.is_valid()
        and not product.dimensions_estimated
    )


def score_confidence(product: Product) -> float:
    """
    Score how much of a product was actually extracted.

    Estimated weight and dimensions do not count.
    """
    score = BASE_CONFIDENCE
    if has_real_name(product):
        score += NAME_CONFIDENCE
    if product.price is not None:
        score += PRICE_CONFIDENCE
    if has_extracted_dimensions(product):
        score += DIMENSIONS_CONFIDENCE
    if has_extracted_weight(product):
        score += WEIGHT_CONFIDENCE
    return round(min(score, 1.0), 2)


def missing_fields(product: Product) -> Dict[str, bool]:
    """Flags for the fields a scrape failed to produce, keyed like ScrapingFailure."""
    image = product.image or ""
    return {
        "missing_name": not has_real_name(product),
        "missing_price": product.price is None,
        "missing_image": not image or "placehold" in image,
        "missing_dimensions": product.dimensions is None,
    }


def merge_for_save(existing: Optional[Product], incoming: Product, confirmed: bool = False) -> Product:
    """
    Combine a stored record with a new observation of the same URL.

    Args:
        existing: Stored record, or None on first save
        incoming: Freshly resolved product
        confirmed: True when a user confirmed the product's data

    Returns:
        The record to persist, with times_seen and confidence updated
    """
    if existing is None:
        record = replace(incoming, times_seen=1)
        record.confirmed = confirmed
        record.confidence = CONFIRMED_CONFIDENCE if confirmed else score_confidence(record)
        return record

    if incoming.is_fallback:
        record = replace(existing)
    else:
        record = replace(
            incoming,
            price=incoming.price if incoming.price is not None else existing.price,
            image=incoming.image or existing.image,
            brand=incoming.brand or existing.brand,
        )
        if not has_extracted_weight(incoming) and (
            has_extracted_weight(existing) or incoming.weight is None
        ):
            record.weight = existing.weight
            record.weight_estimated = existing.weight_estimated
        if not has_extracted_dimensions(incoming) and (
            has_extracted_dimensions(existing) or incoming.dimensions is None
        ):
            record.dimensions = existing.dimensions
            record.dimensions_estimated = existing.dimensions_estimated

    record.times_seen = existing.times_seen + 1
    record.confirmed = existing.confirmed or confirmed
    if record.confirmed:
        record.confidence = CONFIRMED_CONFIDENCE
    else:
        record.confidence = max(existing.confidence, score_confidence(record))
    return record


def hit_confidence(confidence: float) -> float:
    """Confidence after a cache hit: +0.05, capped at 1.0."""
    return round(min(CONFIRMED_CONFIDENCE, confidence + HIT_CONFIDENCE_STEP), 2)


def trimmed_mean(values: Iterable[Optional[float]]) -> Optional[float]:
    """
    Average of the positive values, dropping floor(20%) from each end
    when there are more than five samples.

    >>> trimmed_mean([1, 2, 3, 4, 5, 6, 500])
    4.0
    """
    samples = sorted(v for v in values if v is not None and v > 0)
    if not samples:
        return None

    if len(samples) > TRIM_MIN_SAMPLES:
        cut = math.floor(len(samples) * TRIM_FRACTION)
        samples = samples[cut:len(samples) - cut]

    return sum(samples) / len(samples)


def _average_attributes(products: List[Product]):
    weight = trimmed_mean(p.weight for p in products if has_extracted_weight(p))
    sized = [p.dimensions for p in products if has_extracted_dimensions(p)]
    dimensions = Dimensions.from_values(
        trimmed_mean(d.length for d in sized),
        trimmed_mean(d.width for d in sized),
        trimmed_mean(d.height for d in sized),
    )
    return weight, dimensions


def estimate_from_similar(products: List[Product]) -> Optional[Estimation]:
    """
    Tier 1: average over similar products (same category and retailer).

    Only products with at least one extracted attribute count, and more
    than three are required.
    """
    usable = [p for p in products if has_extracted_weight(p) or has_extracted_dimensions(p)]
    if len(usable) <= SIMILAR_MIN_SAMPLES:
        return None

    weight, dimensions = _average_attributes(usable)
    if weight is None and dimensions is None:
        return None

    return Estimation(
        weight=weight,
        dimensions=dimensions,
        confidence=min(0.9, 0.5 + 0.05 * len(usable)),
        source=SOURCE_SIMILAR_PRODUCTS,
    )


def estimate_from_pattern(
    sample_count: int,
    avg_weight: float,
    avg_length: float,
    avg_width: float,
    avg_height: float,
) -> Optional[Estimation]:
    """Tier 2: category-wide averages, used once more than five samples exist."""
    if sample_count <= PATTERN_MIN_SAMPLES:
        return None

    weight = avg_weight if avg_weight and avg_weight > 0 else None
    dimensions = Dimensions.from_values(avg_length, avg_width, avg_height)
    if weight is None and dimensions is None:
        return None

    return Estimation(
        weight=weight,
        dimensions=dimensions,
        confidence=min(0.7, 0.3 + 0.02 * sample_count),
        source=SOURCE_CATEGORY_PATTERNS,
    )


def category_averages(products: List[Product]) -> Dict[str, float]:
    """Trimmed-mean attribute averages for a CategoryPattern; 0.0 where unknown."""
    weight, _ = _average_attributes(products)
    sized = [p.dimensions for p in products if has_extracted_dimensions(p)]
    return {
        "avg_weight": weight or 0.0,
        "avg_length": trimmed_mean(d.length for d in sized) or 0.0,
        "avg_width": trimmed_mean(d.width for d in sized) or 0.0,
        "avg_height": trimmed_mean(d.height for d in sized) or 0.0,
    }


def running_average(previous: float, count: int, value: float) -> float:
    """Fold value into an average that already covers count - 1 samples."""
    if count <= 1:
        return float(value)
    return previous + (value - previous) / count


def percentage(part: int, total: int) -> float:
    return round(part / total * 100, 2) if total else 0.0
