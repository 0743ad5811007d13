"""
Direct HTML provider.

Fetches the product page with httpx and reads it with BeautifulSoup:
JSON-LD Product data and Open Graph tags first, then generic CSS
selectors. Dimensions and weight are parsed from specification tables or
the page text.
"""

import json
import logging
from typing import Optional

import httpx
from bs4 import BeautifulSoup

from calculator.exceptions import ProviderFailure
from calculator.providers.base import BaseExtractor
from calculator.services.types import RawProduct
from calculator.utils.normalization import parse_dimensions, parse_price, parse_weight

logger = logging.getLogger(__name__)

TITLE_SELECTORS = [
    "h1",
    ".product-title",
    '[data-testid="product-title"]',
    ".product-name",
    ".pdp-title",
]

PRICE_SELECTORS = [
    ".price",
    ".product-price",
    '[data-testid="product-price"]',
    ".current-price",
    ".sale-price",
]

IMAGE_SELECTORS = [
    ".product-image img",
    ".primary-image img",
    ".gallery-image img",
    'img[alt*="product"]',
]

SPEC_SELECTORS = [
    ".specifications__table",
    ".specs-table",
    "#productDetails_techSpec_section_1",
    ".product-specs",
]

MIN_TITLE_LENGTH = 5


def _is_product(item) -> bool:
    """JSON-LD @type may be a string or a list of types."""
    if not isinstance(item, dict):
        return False
    types = item.get("@type")
    if isinstance(types, str):
        return types == "Product"
    return isinstance(types, list) and "Product" in types


class HtmlSelectorExtractor(BaseExtractor):
    """Fallback provider: plain HTTP fetch and generic selectors. Needs no credentials."""

    name = "html_selector"

    DEFAULT_HEADERS = {
        "User-Agent": (
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
            "AppleWebKit/537.36 (KHTML, like Gecko) "
            "Chrome/120.0.0.0 Safari/537.36"
        ),
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        "Accept-Language": "en-US,en;q=0.9",
        # httpx does not decode brotli without an extra package
        "Accept-Encoding": "gzip, deflate",
    }

    def is_available(self) -> bool:
        return True

    async def scrape(self, url: str) -> RawProduct:
        async with httpx.AsyncClient(
            timeout=self.timeout,
            follow_redirects=True,
            headers=self.DEFAULT_HEADERS,
        ) as client:
            try:
                response = await client.get(url)
            except httpx.HTTPError as e:
                raise ProviderFailure(self.name, f"request failed: {e}")

        if response.status_code >= 400:
            raise ProviderFailure(self.name, f"HTTP {response.status_code}")

        return self.parse_html(response.text)

    def parse_html(self, html: str) -> RawProduct:
        soup = BeautifulSoup(html, "html.parser")
        product = self._from_json_ld(soup) or RawProduct()

        if not product.name:
            product.name = self._meta(soup, "og:title") or self._first_text(soup, TITLE_SELECTORS)
        if product.price is None:
            product.price = parse_price(self._meta(soup, "product:price:amount"))
        if product.price is None:
            for selector in PRICE_SELECTORS:
                element = soup.select_one(selector)
                price = parse_price(element.get_text(strip=True)) if element else None
                if price is not None:
                    product.price = price
                    break
        if not product.image:
            product.image = self._meta(soup, "og:image") or self._first_image(soup)

        spec_text = " ".join(
            element.get_text(" ", strip=True)
            for selector in SPEC_SELECTORS
            for element in soup.select(selector)
        )
        page_text = soup.body.get_text(" ", strip=True) if soup.body else ""

        if product.dimensions is None:
            product.dimensions = parse_dimensions(spec_text) or parse_dimensions(page_text)
        if product.weight is None:
            product.weight = parse_weight(spec_text) or parse_weight(page_text)

        return product

    def _from_json_ld(self, soup: BeautifulSoup) -> Optional[RawProduct]:
        for script in soup.find_all("script", type="application/ld+json"):
            try:
                data = json.loads(script.string or "")
            except ValueError:
                continue

            if isinstance(data, dict):
                candidates = data.get("@graph", [data])
                if not isinstance(candidates, list):
                    candidates = [data]
            elif isinstance(data, list):
                candidates = data
            else:
                continue
            for item in candidates:
                if not _is_product(item):
                    continue

                offers = item.get("offers") or {}
                if isinstance(offers, list):
                    offers = offers[0] if offers else {}
                if not isinstance(offers, dict):
                    offers = {}
                image = item.get("image")
                if isinstance(image, list):
                    image = image[0] if image else None
                brand = item.get("brand")
                if isinstance(brand, dict):
                    brand = brand.get("name")

                name = item.get("name")
                name = name.strip() if isinstance(name, str) else ""
                availability = str(offers.get("availability") or "")
                return RawProduct(
                    name=name or None,
                    price=parse_price(offers.get("price")),
                    image=image if isinstance(image, str) else None,
                    brand=brand if isinstance(brand, str) and brand else None,
                    in_stock="OutOfStock" not in availability,
                    description=item.get("description"),
                )
        return None

    @staticmethod
    def _meta(soup: BeautifulSoup, prop: str) -> Optional[str]:
        tag = soup.find("meta", attrs={"property": prop})
        content = tag.get("content") if tag else None
        return content.strip() if content and content.strip() else None

    @staticmethod
    def _first_text(soup: BeautifulSoup, selectors) -> Optional[str]:
        for selector in selectors:
            element = soup.select_one(selector)
            text = element.get_text(strip=True) if element else ""
            if len(text) > MIN_TITLE_LENGTH:
                return text
        return None

    @staticmethod
    def _first_image(soup: BeautifulSoup) -> Optional[str]:
        for selector in IMAGE_SELECTORS:
            element = soup.select_one(selector)
            if element is None:
                continue
            src = element.get("src") or element.get("data-src")
            if src and "placeholder" not in src and "loading" not in src:
                return src
        return None
