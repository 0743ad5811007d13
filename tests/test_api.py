"""
Tests for the calculator REST API and health check.

Test settings configure no providers and the in-memory store, so
resolution falls back without network access unless a test injects
providers.
"""

from decimal import Decimal
from unittest.mock import patch

import pytest

from calculator.services.batch import BatchCoordinator
from calculator.services.orchestrator import ScrapeOrchestrator
from calculator.services.types import Dimensions, RawProduct

RESOLVE_URL = "/api/v1/products/resolve/"
CONFIRM_URL = "/api/v1/products/confirm-price/"
WAYFAIR_URL = "https://www.wayfair.com/furniture/pdp/modern-oak-dining-table-w001.html"


@pytest.fixture
def coordinator_with(fake_provider, memory_store):
    """Patch the API coordinator to use the given RawProduct."""

    def _patch(raw):
        provider = fake_provider("scrapingbee_ai", result=raw)
        coordinator = BatchCoordinator(ScrapeOrchestrator(providers=[provider], store=memory_store))
        return patch("calculator.api.views._get_coordinator", return_value=coordinator)

    return _patch


@pytest.mark.django_db
class TestResolveProducts:

    def test_resolves_in_order(self, api_client):
        urls = [WAYFAIR_URL, "https://www.amazon.com/dp/B08N5WRWNW"]

        response = api_client.post(RESOLVE_URL, {"urls": urls}, format="json")

        assert response.status_code == 200
        products = response.json()["products"]
        assert [p["url"] for p in products] == urls
        assert products[0]["name"] == "Product from Wayfair"
        assert products[0]["scraping_method"] == "fallback"
        assert products[0]["needs_price_confirmation"] is True
        assert products[1]["retailer"] == "Amazon"

    def test_product_payload(self, api_client, coordinator_with):
        raw = RawProduct(
            name="Modern Oak Dining Table",
            price=Decimal("499.99"),
            image="https://img.example.com/t.jpg",
            weight=40.0,
            dimensions=Dimensions(60, 36, 30),
        )

        with coordinator_with(raw):
            response = api_client.post(RESOLVE_URL, {"urls": [WAYFAIR_URL]}, format="json")

        product = response.json()["products"][0]
        assert product["price"] == "499.99"
        assert product["category"] == "Furniture"
        assert product["dimensions"] == {"length": 60, "width": 36, "height": 30}
        assert product["confidence"] == 1.0
        assert product["needs_price_confirmation"] is False
        landed = product["landed_pricing"]
        assert Decimal(landed["subtotal"]) == Decimal("499.99") + Decimal(product["shipping_cost"])
        assert Decimal(landed["landed_price"]) == Decimal(landed["subtotal"]) + Decimal(landed["margin"])

    @pytest.mark.parametrize(
        "payload",
        [
            {},
            {"urls": []},
            {"urls": "https://www.amazon.com/dp/1"},
            {"urls": ["not a url"]},
            {"urls": [f"https://www.amazon.com/dp/{i}" for i in range(21)]},
        ],
    )
    def test_invalid_input(self, api_client, payload):
        response = api_client.post(RESOLVE_URL, payload, format="json")

        assert response.status_code == 400
        assert "error" in response.json()

    @pytest.mark.parametrize(
        "body",
        [
            ["https://www.amazon.com/dp/B08N5WRWNW"],
            "https://www.amazon.com/dp/B08N5WRWNW",
            42,
        ],
    )
    def test_body_must_be_an_object(self, api_client, body):
        response = api_client.post(RESOLVE_URL, body, format="json")

        assert response.status_code == 400
        assert "error" in response.json()


@pytest.mark.django_db
class TestConfirmPrice:

    def test_unknown_product(self, api_client):
        response = api_client.post(
            CONFIRM_URL, {"url": WAYFAIR_URL, "price": "100", "confirmed": True}, format="json"
        )

        assert response.status_code == 200
        data = response.json()
        assert data["category"] == "General Merchandise"
        assert data["shipping_cost"] == "20.00"
        assert data["landed_pricing"]["landed_price"] == "150.00"
        assert data["confirmed"] is False

    def test_confirms_known_product(self, api_client, coordinator_with, memory_store):
        raw = RawProduct(name="Modern Oak Dining Table", weight=40.0)
        with coordinator_with(raw):
            api_client.post(RESOLVE_URL, {"urls": [WAYFAIR_URL]}, format="json")

        response = api_client.post(
            CONFIRM_URL, {"url": WAYFAIR_URL, "price": "300.00", "confirmed": True}, format="json"
        )

        data = response.json()
        assert data["confirmed"] is True
        assert data["category"] == "Furniture"
        # 15 * 2.5 + 40 * 2.5 + 300 * 0.05
        assert data["shipping_cost"] == "152.50"
        assert memory_store._products[WAYFAIR_URL].confidence == 1.0
        assert memory_store._products[WAYFAIR_URL].price == Decimal("300.00")

    def test_string_false_is_not_a_confirmation(self, api_client, coordinator_with, memory_store):
        with coordinator_with(RawProduct(name="Modern Oak Dining Table")):
            api_client.post(RESOLVE_URL, {"urls": [WAYFAIR_URL]}, format="json")

        response = api_client.post(
            CONFIRM_URL, {"url": WAYFAIR_URL, "price": "300", "confirmed": "false"}, format="json"
        )

        assert response.status_code == 200
        assert response.json()["confirmed"] is False
        assert memory_store._products[WAYFAIR_URL].price is None
        assert memory_store._products[WAYFAIR_URL].confirmed is False

    def test_unconfirmed_price_is_not_stored(self, api_client, coordinator_with, memory_store):
        with coordinator_with(RawProduct(name="Modern Oak Dining Table")):
            api_client.post(RESOLVE_URL, {"urls": [WAYFAIR_URL]}, format="json")

        response = api_client.post(CONFIRM_URL, {"url": WAYFAIR_URL, "price": "300"}, format="json")

        assert response.json()["confirmed"] is False
        assert memory_store._products[WAYFAIR_URL].price is None

    @pytest.mark.parametrize(
        "payload",
        [
            {"price": "10"},
            {"url": "ftp://example.com", "price": "10"},
            {"url": WAYFAIR_URL},
            {"url": WAYFAIR_URL, "price": "free"},
            {"url": WAYFAIR_URL, "price": "10", "confirmed": "maybe"},
            [WAYFAIR_URL, "10"],
        ],
    )
    def test_invalid_input(self, api_client, payload):
        response = api_client.post(CONFIRM_URL, payload, format="json")
        assert response.status_code == 400


@pytest.mark.django_db
class TestInsightsAndHealth:

    def test_insights(self, api_client):
        api_client.post(RESOLVE_URL, {"urls": [WAYFAIR_URL]}, format="json")

        response = api_client.get("/api/v1/insights/")

        assert response.status_code == 200
        data = response.json()
        assert data["backend"] == "memory"
        assert data["total_products"] == 1
        assert data["total_scrapes"] == 1

    def test_health_check(self, api_client, settings):
        settings.CALCULATOR_PROVIDERS = [
            "calculator.providers.scrapingbee_ai.ScrapingBeeAIExtractor",
            "calculator.providers.html_selector.HtmlSelectorExtractor",
        ]

        response = api_client.get("/api/health/")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["database"] == "connected"
        assert data["store_backend"] == "memory"
        assert data["providers"] == {"scrapingbee_ai": False, "html_selector": True}

