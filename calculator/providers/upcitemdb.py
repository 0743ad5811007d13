"""
UPCitemdb provider.

UPCitemdb has no page scraping: the product is looked up by a search term
taken from the URL slug, retried with a simplified term. It is good for
names, images, weight and dimensions but never returns a current price.
"""

import logging
from typing import Optional

import httpx
from django.conf import settings

from calculator.exceptions import ProviderFailure, ProviderUnavailable
from calculator.providers.base import BaseExtractor
from calculator.services.types import Dimensions, RawProduct
from calculator.utils.normalization import (
    parse_dimensions,
    parse_weight,
    search_term_from_url,
    simplify_product_name,
)

logger = logging.getLogger(__name__)

UPCITEMDB_SEARCH_URL = "https://api.upcitemdb.com/prod/trial/search"


class UPCItemDBExtractor(BaseExtractor):
    """Last-resort provider: UPCitemdb search by name."""

    name = "upcitemdb"

    def __init__(self, api_key=None, timeout=None):
        super().__init__(timeout)
        self.api_key = api_key or getattr(settings, "UPCITEMDB_API_KEY", "")

    def is_available(self) -> bool:
        return bool(self.api_key)

    async def scrape(self, url: str) -> RawProduct:
        if not self.api_key:
            raise ProviderUnavailable(self.name, "UPCITEMDB_API_KEY not configured")

        term = search_term_from_url(url)
        terms = [term]
        simplified = simplify_product_name(term)
        if simplified and simplified != term:
            terms.append(simplified)

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            for search_term in terms:
                item = await self._search(client, search_term)
                if item:
                    return self.parse_item(item)

        raise ProviderFailure(self.name, f"no results for '{term}'")

    async def _search(self, client: httpx.AsyncClient, term: str) -> Optional[dict]:
        logger.debug("UPCitemdb search: %s", term[:50])
        try:
            response = await client.get(
                UPCITEMDB_SEARCH_URL,
                params={"s": term, "match_mode": "0", "type": "product"},
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
            )
        except httpx.HTTPError as e:
            raise ProviderFailure(self.name, f"request failed: {e}")

        if response.status_code >= 400:
            raise ProviderFailure(self.name, f"HTTP {response.status_code}")

        try:
            items = response.json().get("items") or []
        except (ValueError, AttributeError) as e:
            raise ProviderFailure(self.name, f"invalid JSON response: {e}")

        return items[0] if items else None

    @staticmethod
    def parse_item(item: dict) -> RawProduct:
        """Map a UPCitemdb search item to a RawProduct (never priced)."""
        dimensions = parse_dimensions(item.get("dimension") or "")
        if dimensions is None:
            dimensions = Dimensions.from_values(item.get("length"), item.get("width"), item.get("height"))
        if dimensions is None:
            dimensions = parse_dimensions(item.get("size") or "")

        weight = parse_weight(item.get("weight"))
        if weight is None:
            weight = parse_weight(item.get("shipping_weight"))

        images = item.get("images") or []
        category = (item.get("category") or "").split(">")[0].strip() or None

        return RawProduct(
            name=(item.get("title") or "").strip() or None,
            price=None,
            image=images[0] if images else None,
            weight=weight,
            dimensions=dimensions,
            brand=item.get("brand") or None,
            category=category,
            description=item.get("description") or None,
        )
