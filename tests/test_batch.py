"""
Tests for batch validation and BatchCoordinator.
"""

import asyncio
from decimal import Decimal
from unittest.mock import AsyncMock, patch

import pytest

from calculator.exceptions import InvalidInput
from calculator.services.batch import BatchCoordinator, is_http_url, validate_urls
from calculator.services.estimation_store import NullProductStore
from calculator.services.orchestrator import ScrapeOrchestrator, build_fallback_product
from calculator.services.types import RawProduct


def _urls(count):
    return [f"https://www.amazon.com/item-{i}/dp/B0{i:08d}" for i in range(count)]


class TestValidateUrls:

    def test_valid_batch_is_stripped(self):
        assert validate_urls(["  https://www.amazon.com/dp/1 "]) == ["https://www.amazon.com/dp/1"]

    @pytest.mark.parametrize(
        "urls",
        [
            None,
            "https://www.amazon.com/dp/1",
            {"url": "https://www.amazon.com/dp/1"},
            [],
        ],
    )
    def test_rejects_non_lists_and_empty(self, urls):
        with pytest.raises(InvalidInput):
            validate_urls(urls)

    def test_rejects_more_than_twenty(self):
        validate_urls(_urls(20))
        with pytest.raises(InvalidInput, match="Maximum 20"):
            validate_urls(_urls(21))

    @pytest.mark.parametrize("bad", ["ftp://example.com/x", "www.amazon.com/dp/1", "", 42, None, "https://"])
    def test_rejects_non_http_urls(self, bad):
        with pytest.raises(InvalidInput):
            validate_urls(["https://www.amazon.com/dp/1", bad])

    def test_is_http_url(self):
        assert is_http_url("http://example.com")
        assert not is_http_url("mailto:someone@example.com")


class TestBatchCoordinator:

    @pytest.mark.asyncio
    async def test_results_keep_input_order(self, fake_provider):
        async def resolve(url):
            # later URLs finish first
            await asyncio.sleep(0.01 * (10 - int(url.split("-")[1].split("/")[0])))
            return build_fallback_product(url)

        orchestrator = ScrapeOrchestrator(providers=[], store=NullProductStore())
        coordinator = BatchCoordinator(orchestrator, group_size=3, pacing_seconds=0)
        urls = _urls(7)

        with patch.object(orchestrator, "resolve_product", side_effect=resolve):
            products = await coordinator.resolve_products(urls)

        assert [p.url for p in products] == urls

    @pytest.mark.asyncio
    async def test_empty_list_is_rejected_before_any_provider_call(self, fake_provider):
        provider = fake_provider("apify", result=RawProduct(name="Thing"))
        coordinator = BatchCoordinator(ScrapeOrchestrator(providers=[provider], store=NullProductStore()))

        with pytest.raises(InvalidInput):
            await coordinator.resolve_products([])

        assert provider.calls == []

    @pytest.mark.asyncio
    async def test_oversized_batch_is_rejected_before_any_provider_call(self, fake_provider):
        provider = fake_provider("apify", result=RawProduct(name="Thing"))
        coordinator = BatchCoordinator(ScrapeOrchestrator(providers=[provider], store=NullProductStore()))

        with pytest.raises(InvalidInput):
            await coordinator.resolve_products(_urls(21))

        assert provider.calls == []

    @pytest.mark.asyncio
    async def test_malformed_url_rejects_whole_batch(self, fake_provider):
        provider = fake_provider("apify", result=RawProduct(name="Thing"))
        coordinator = BatchCoordinator(ScrapeOrchestrator(providers=[provider], store=NullProductStore()))

        with pytest.raises(InvalidInput):
            await coordinator.resolve_products(["https://www.amazon.com/dp/1", "not a url"])

        assert provider.calls == []

    @pytest.mark.asyncio
    async def test_exception_becomes_error_fallback(self):
        orchestrator = ScrapeOrchestrator(providers=[], store=NullProductStore())
        coordinator = BatchCoordinator(orchestrator, pacing_seconds=0)
        urls = _urls(3)

        async def resolve(url):
            if url == urls[1]:
                raise RuntimeError("boom")
            return build_fallback_product(url)

        with patch.object(orchestrator, "resolve_product", side_effect=resolve):
            products = await coordinator.resolve_products(urls)

        assert [p.scraping_method for p in products] == ["fallback", "error_fallback", "fallback"]
        assert products[1].url == urls[1]
        assert products[1].category == "General Merchandise"
        assert products[1].shipping_cost >= Decimal("10.00")

    @pytest.mark.asyncio
    async def test_groups_are_paced(self):
        orchestrator = ScrapeOrchestrator(providers=[], store=NullProductStore())
        coordinator = BatchCoordinator(orchestrator, group_size=3, pacing_seconds=0.5)

        with patch("calculator.services.batch.asyncio.sleep", new=AsyncMock()) as sleep:
            products = await coordinator.resolve_products(_urls(7))

        assert len(products) == 7
        # three groups, pauses only between them
        assert sleep.await_count == 2
        sleep.assert_awaited_with(0.5)

    @pytest.mark.asyncio
    async def test_all_fallbacks_when_no_providers(self):
        coordinator = BatchCoordinator(ScrapeOrchestrator(providers=[], store=NullProductStore()), pacing_seconds=0)

        products = await coordinator.resolve_products(_urls(4))

        assert all(p.scraping_method == "fallback" for p in products)
        assert all(p.needs_price_confirmation for p in products)
