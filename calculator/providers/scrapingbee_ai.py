"""
ScrapingBee AI extraction provider.

Asks ScrapingBee to render the page through a premium US proxy and extract
product fields with its AI extraction rules. The scrapingbee client is
synchronous, so requests run in the default executor.
"""

import asyncio
import json
import logging

from django.conf import settings

from calculator.exceptions import ProviderFailure, ProviderUnavailable
from calculator.providers.base import BaseExtractor
from calculator.services.types import RawProduct
from calculator.utils.normalization import parse_price

logger = logging.getLogger(__name__)

AI_EXTRACT_RULES = {
    "product_name": "Product name or title",
    "price": "Product price in USD",
    "image_url": "Main product image URL",
    "availability": "In stock status",
    "brand": "Product brand",
    "description": "Product description",
}


class ScrapingBeeAIExtractor(BaseExtractor):
    """Primary provider: ScrapingBee with AI extraction rules."""

    name = "scrapingbee_ai"

    def __init__(self, api_key=None, timeout=None):
        super().__init__(timeout)
        self.api_key = api_key or getattr(settings, "SCRAPINGBEE_API_KEY", "")
        self._client = None

    def is_available(self) -> bool:
        return bool(self.api_key)

    def _init_client(self):
        if not self.api_key:
            raise ProviderUnavailable(self.name, "SCRAPINGBEE_API_KEY not configured")

        from scrapingbee import ScrapingBeeClient
        self._client = ScrapingBeeClient(api_key=self.api_key)
        logger.info("ScrapingBee client initialized")

    async def scrape(self, url: str) -> RawProduct:
        if self._client is None:
            self._init_client()

        params = {
            "premium_proxy": "true",
            "country_code": "us",
            "ai_extract_rules": json.dumps(AI_EXTRACT_RULES),
            "timeout": int(self.timeout * 1000),
        }

        loop = asyncio.get_running_loop()
        response = await loop.run_in_executor(
            None,
            lambda: self._client.get(url, params=params, timeout=self.timeout),
        )

        if not response.ok:
            raise ProviderFailure(self.name, f"HTTP {response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            raise ProviderFailure(self.name, f"invalid JSON response: {e}")

        if not isinstance(data, dict):
            raise ProviderFailure(self.name, "unexpected response payload")

        return self.parse_response(data)

    @staticmethod
    def parse_response(data: dict) -> RawProduct:
        """Map ScrapingBee AI extraction output to a RawProduct."""
        availability = str(data.get("availability") or "")
        return RawProduct(
            name=(data.get("product_name") or "").strip() or None,
            price=parse_price(data.get("price")),
            image=data.get("image_url") or None,
            brand=data.get("brand") or None,
            in_stock="out" not in availability.lower(),
            description=data.get("description") or None,
        )
