"""
Parsing helpers for values scraped from product pages and APIs.

Weights are normalized to pounds and dimensions to inches. Values outside
a plausible range for a single shippable item are discarded rather than
clamped.

Conversions:
- kg -> lb: 2.205
- g  -> lb: 0.00220462
- oz -> lb: 0.0625
"""

import re
from decimal import Decimal, InvalidOperation
from typing import Optional, Union
from urllib.parse import urlparse

from calculator.services.types import Dimensions

MAX_WEIGHT_LBS = 500
MIN_WEIGHT_LBS = 0.1
MAX_DIMENSION_INCHES = 200

WEIGHT_PATTERNS = [
    (re.compile(r"(\d+(?:\.\d+)?)\s*(?:pounds?|lbs?)\b", re.IGNORECASE), 1.0),
    (re.compile(r"(\d+(?:\.\d+)?)\s*(?:kilograms?|kgs?)\b", re.IGNORECASE), 2.205),
    (re.compile(r"(\d+(?:\.\d+)?)\s*(?:grams?|g)\b", re.IGNORECASE), 0.00220462),
    (re.compile(r"(\d+(?:\.\d+)?)\s*(?:ounces?|oz)\b", re.IGNORECASE), 0.0625),
]

DIMENSION_PATTERNS = [
    re.compile(
        r"(\d+(?:\.\d+)?)\s*[x×]\s*(\d+(?:\.\d+)?)\s*[x×]\s*(\d+(?:\.\d+)?)",
        re.IGNORECASE,
    ),
    re.compile(
        r'(\d+(?:\.\d+)?)"?\s*[WL]\s*[x×]\s*(\d+(?:\.\d+)?)"?\s*[DW]\s*[x×]\s*(\d+(?:\.\d+)?)"?\s*[HT]',
        re.IGNORECASE,
    ),
    re.compile(r"L:\s*(\d+(?:\.\d+)?).*?W:\s*(\d+(?:\.\d+)?).*?H:\s*(\d+(?:\.\d+)?)", re.IGNORECASE),
    re.compile(
        r"Length:\s*(\d+(?:\.\d+)?).*?Width:\s*(\d+(?:\.\d+)?).*?Height:\s*(\d+(?:\.\d+)?)",
        re.IGNORECASE,
    ),
]

PRICE_PATTERN = re.compile(r"\d+(?:,\d{3})*(?:\.\d{1,2})?")

NOISE_WORDS = re.compile(r"\b(by|from|brand|inc|corp|ltd|llc)\b", re.IGNORECASE)
RETAILER_WORDS = re.compile(r"\b(amazon|wayfair|target|walmart|best buy|home depot)\b", re.IGNORECASE)


def parse_price(value: Union[str, int, float, Decimal, None]) -> Optional[Decimal]:
    """
    Parse a price from a number or a display string like "$1,299.99".

    Returns:
        Positive Decimal rounded to cents, or None if no price was found
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, (int, float, Decimal)):
        text = str(value)
    else:
        match = PRICE_PATTERN.search(str(value))
        if not match:
            return None
        text = match.group(0).replace(",", "")

    try:
        price = Decimal(text).quantize(Decimal("0.01"))
    except (InvalidOperation, ValueError):
        return None

    return price if price > 0 else None


def parse_weight(value: Union[str, int, float, None]) -> Optional[float]:
    """
    Parse a weight in pounds from a number or free text.

    Bare numbers (and numeric strings) are taken as pounds. Text is matched against pound,
    kilogram, gram and ounce patterns in that order.

    Returns:
        Weight in pounds rounded to 0.1, or None if absent or implausible
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        weight = float(value)
    else:
        weight = None
        for pattern, multiplier in WEIGHT_PATTERNS:
            match = pattern.search(str(value))
            if match:
                weight = float(match.group(1)) * multiplier
                break
        if weight is None:
            try:
                weight = float(str(value).strip())
            except ValueError:
                return None

    if MIN_WEIGHT_LBS < weight < MAX_WEIGHT_LBS:
        return round(weight, 1)
    return None


def parse_dimensions(text: Optional[str]) -> Optional[Dimensions]:
    """
    Parse package dimensions (inches) from free text.

    Recognizes "10 x 8 x 2", '30"W x 20"D x 15"H', "L: 10 W: 8 H: 2" and
    "Length: 10 Width: 8 Height: 2". The first plausible match wins.
    """
    if not text:
        return None

    for pattern in DIMENSION_PATTERNS:
        match = pattern.search(text)
        if not match:
            continue
        values = [float(group) for group in match.groups()]
        if all(0 < v < MAX_DIMENSION_INCHES for v in values):
            return Dimensions(*values)

    return None


def search_term_from_url(url: str) -> str:
    """
    Derive a product search term from a URL slug.

    Uses the first path segment longer than 10 characters containing a dash,
    e.g. ".../dp/modern-oak-dining-table/..." -> "modern oak dining table".
    """
    try:
        path = urlparse(url).path
    except ValueError:
        return "product"

    for part in path.split("/"):
        if len(part) > 10 and "-" in part:
            return part.replace("-", " ").strip()
    return "product"


def simplify_product_name(name: Optional[str], max_words: int = 5) -> str:
    """Strip brand/retailer noise words and keep the first few words of a name."""
    if not name:
        return ""

    simplified = NOISE_WORDS.sub("", name)
    simplified = RETAILER_WORDS.sub("", simplified)
    words = simplified.split()
    return " ".join(words[:max_words])
