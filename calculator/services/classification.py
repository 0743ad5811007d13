"""
Retailer detection and merchandise category classification.

Both are pure functions over the product URL and name. Category rules are
checked in a fixed order and the first match wins, so a name like
"gaming chair" is Furniture (checked before Electronics).
"""

import re
from typing import List, Optional, Tuple
from urllib.parse import urlparse

from calculator.models import Category

UNKNOWN_RETAILER = "Unknown Retailer"

# Domain fragment -> retailer label, matched against the URL hostname
RETAILER_DOMAINS: List[Tuple[str, str]] = [
    ("amazon.com", "Amazon"),
    ("wayfair.com", "Wayfair"),
    ("target.com", "Target"),
    ("bestbuy.com", "Best Buy"),
    ("walmart.com", "Walmart"),
    ("homedepot.com", "Home Depot"),
    ("lowes.com", "Lowes"),
    ("costco.com", "Costco"),
    ("macys.com", "Macys"),
    ("ikea.com", "IKEA"),
    ("overstock.com", "Overstock"),
    ("cb2.com", "CB2"),
    ("crateandbarrel.com", "Crate & Barrel"),
    ("westelm.com", "West Elm"),
    ("potterybarn.com", "Pottery Barn"),
]

KNOWN_RETAILERS = frozenset(label for _, label in RETAILER_DOMAINS) | {UNKNOWN_RETAILER}


def _keywords(*words: str) -> "re.Pattern[str]":
    return re.compile(r"\b(" + "|".join(re.escape(w) for w in words) + r")\b")


# Order matters: first matching rule wins.
CATEGORY_RULES: List[Tuple[str, "re.Pattern[str]"]] = [
    (Category.FURNITURE, _keywords(
        "chair", "sofa", "couch", "table", "desk", "bed", "mattress", "dresser",
        "cabinet", "bookshelf", "nightstand", "ottoman", "bench", "stool",
    )),
    (Category.HOME_GARDEN, _keywords(
        "lamp", "light", "lighting", "curtain", "rug", "carpet", "pillow",
        "cushion", "blanket", "throw", "vase", "plant", "garden", "outdoor",
    )),
    (Category.ELECTRONICS, _keywords(
        "tv", "television", "computer", "laptop", "phone", "tablet", "speaker",
        "headphone", "camera", "gaming", "xbox", "playstation", "nintendo",
    )),
    (Category.KITCHEN_DINING, _keywords(
        "kitchen", "dining", "cookware", "appliance", "blender", "mixer",
        "coffee", "microwave", "refrigerator", "dishwasher",
    )),
    (Category.CLOTHING, _keywords(
        "shirt", "pants", "dress", "shoes", "jacket", "coat", "hat", "bag",
        "watch", "jewelry", "clothing", "apparel",
    )),
    (Category.SPORTS_OUTDOORS, _keywords(
        "sport", "fitness", "exercise", "bike", "bicycle", "camping", "hiking",
        "fishing", "golf", "tennis", "basketball",
    )),
    (Category.TOOLS_HARDWARE, _keywords(
        "tool", "drill", "hammer", "saw", "wrench", "hardware", "construction",
        "repair", "maintenance",
    )),
    (Category.BEAUTY, _keywords(
        "beauty", "cosmetic", "skincare", "shampoo", "soap", "perfume", "makeup",
        "personal care",
    )),
    (Category.BOOKS_MEDIA, _keywords(
        "book", "dvd", "cd", "music", "movie", "game", "media", "magazine",
    )),
    (Category.TOYS_GAMES, _keywords(
        "toy", "game", "puzzle", "doll", "action figure", "lego", "board game",
        "kids", "children",
    )),
]


def detect_retailer(url: str) -> str:
    """
    Map a URL to a known retailer label.

    Args:
        url: Product page URL

    Returns:
        Retailer label, or "Unknown Retailer" for unknown or malformed URLs
    """
    try:
        hostname = (urlparse(url).hostname or "").lower()
    except (ValueError, AttributeError):
        return UNKNOWN_RETAILER

    for domain, label in RETAILER_DOMAINS:
        if domain in hostname:
            return label
    return UNKNOWN_RETAILER


def classify_product(name: Optional[str], url: Optional[str]) -> str:
    """
    Classify a product into a merchandise category.

    Args:
        name: Product name (may be empty)
        url: Product URL (may be empty)

    Returns:
        Category value; "General Merchandise" when no rule matches
    """
    text = f"{name or ''} {url or ''}".lower()

    for category, pattern in CATEGORY_RULES:
        if pattern.search(text):
            return category.value
    return Category.GENERAL.value


def normalize_category(category: Optional[str]) -> Optional[str]:
    """Return the matching Category value for a provider-supplied label, or None."""
    if not category:
        return None
    cleaned = category.strip().lower()
    for value in Category.values:
        if value.lower() == cleaned:
            return value
    return None
