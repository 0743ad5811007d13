"""
Apify web-scraper actor provider.

Runs the public apify/web-scraper actor synchronously through the Apify
REST API and reads the first dataset item. The page function tries a list
of common title, price and image selectors.
"""

import logging

import httpx
from django.conf import settings

from calculator.exceptions import ProviderFailure, ProviderUnavailable
from calculator.providers.base import BaseExtractor
from calculator.services.types import RawProduct
from calculator.utils.normalization import parse_price

logger = logging.getLogger(__name__)

APIFY_RUN_SYNC_URL = "https://api.apify.com/v2/acts/apify~web-scraper/run-sync-get-dataset-items"

PAGE_FUNCTION = """
async function pageFunction(context) {
    const { $, request } = context;
    const titleSelectors = ['h1', '[data-testid="product-title"]', '.product-title',
        '#productTitle', '[itemprop="name"]', '.product-name'];
    const priceSelectors = ['[data-testid="product-price"]', '.price-now', '.price',
        '[itemprop="price"]', '.product-price', '.current-price'];
    const imageSelectors = ['img.mainImage', '[data-testid="product-image"] img',
        '.product-photo img', '#landingImage', '[itemprop="image"]'];

    function extractText(selectors) {
        for (const selector of selectors) {
            const element = $(selector).first();
            if (element.length) return element.text().trim();
        }
        return null;
    }

    function extractImage(selectors) {
        for (const selector of selectors) {
            const element = $(selector).first();
            if (element.length) return element.attr('src') || element.attr('data-src');
        }
        return null;
    }

    return {
        url: request.url,
        title: extractText(titleSelectors),
        price: extractText(priceSelectors),
        image: extractImage(imageSelectors),
    };
}
"""


class ApifyActorExtractor(BaseExtractor):
    """Secondary provider: Apify web-scraper actor."""

    name = "apify"

    def __init__(self, api_token=None, timeout=None):
        super().__init__(timeout)
        self.api_token = api_token or getattr(settings, "APIFY_API_TOKEN", "")

    def is_available(self) -> bool:
        return bool(self.api_token)

    def build_run_input(self, url: str) -> dict:
        return {
            "startUrls": [{"url": url}],
            "pageFunction": PAGE_FUNCTION,
            "proxyConfiguration": {"useApifyProxy": True},
            "maxRequestsPerCrawl": 1,
        }

    async def scrape(self, url: str) -> RawProduct:
        if not self.api_token:
            raise ProviderUnavailable(self.name, "APIFY_API_TOKEN not configured")

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            try:
                response = await client.post(
                    APIFY_RUN_SYNC_URL,
                    params={"token": self.api_token},
                    json=self.build_run_input(url),
                )
            except httpx.HTTPError as e:
                raise ProviderFailure(self.name, f"request failed: {e}")

        if response.status_code >= 400:
            raise ProviderFailure(self.name, f"HTTP {response.status_code}")

        try:
            items = response.json()
        except ValueError as e:
            raise ProviderFailure(self.name, f"invalid JSON response: {e}")

        if not items or not isinstance(items, list):
            raise ProviderFailure(self.name, "no data found")

        return self.parse_item(items[0])

    @staticmethod
    def parse_item(item: dict) -> RawProduct:
        """Map an actor dataset item to a RawProduct."""
        return RawProduct(
            name=(item.get("title") or "").strip() or None,
            price=parse_price(item.get("price")),
            image=item.get("image") or None,
        )
