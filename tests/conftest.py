"""
Pytest configuration and fixtures for the import calculator test suite.
"""

import asyncio
from decimal import Decimal

import pytest

from calculator.providers.base import BaseExtractor
from calculator.services.types import Dimensions, Product, RawProduct


class FakeProvider(BaseExtractor):
    """Provider that returns a canned RawProduct or raises a canned error."""

    def __init__(self, name, result=None, error=None, available=True, delay=0.0, timeout=5.0):
        self.name = name
        super().__init__(timeout)
        self.result = result
        self.error = error
        self.available = available
        self.delay = delay
        self.calls = []

    def is_available(self):
        return self.available

    async def scrape(self, url):
        self.calls.append(url)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def fake_provider():
    """Factory for FakeProvider instances."""
    return FakeProvider


@pytest.fixture
def make_product():
    """Factory for Product records with sensible extracted defaults."""

    def _make(url="https://www.wayfair.com/furniture/pdp/oak-dining-table-w001.html", **overrides):
        fields = {
            "url": url,
            "name": "Oak Dining Table",
            "retailer": "Wayfair",
            "category": "Furniture",
            "shipping_cost": Decimal("100.00"),
            "scraping_method": "scrapingbee_ai",
            "price": Decimal("499.99"),
            "image": "https://img.example.com/table.jpg",
            "weight": 40.0,
            "dimensions": Dimensions(60, 36, 30),
        }
        fields.update(overrides)
        return Product(**fields)

    return _make


@pytest.fixture
def raw_product():
    return RawProduct(
        name="Modern Oak Dining Table",
        price=Decimal("499.99"),
        image="https://img.example.com/table.jpg",
        weight=45.0,
        dimensions=Dimensions(60, 36, 30),
        brand="Oakline",
    )


@pytest.fixture
def memory_store():
    """The process-wide in-memory store, emptied for each test."""
    from calculator.services.estimation_store import get_memory_store

    store = get_memory_store()
    store.reset()
    yield store
    store.reset()


@pytest.fixture(autouse=True)
def _reset_memory_store(memory_store):
    yield


@pytest.fixture
def api_client():
    """Create a test API client."""
    from rest_framework.test import APIClient

    return APIClient()
