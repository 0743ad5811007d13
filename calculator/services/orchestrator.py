"""
Scrape orchestrator: resolves one product URL into a Product.

Flow:
1. Cache: a stored product above the confidence threshold and within the
   max age window is returned without calling any provider. The hit is
   recorded as another observation of the product.
2. Providers are tried in configured order, each under its own timeout.
   The first result with a real product name wins.
3. No winner: a fallback product named after the retailer.
4. Category from the provider when it is a known category, else classified.
5. Missing weight/dimensions are filled from the estimation store.
6. Shipping, confidence and price-confirmation flag are computed, then the
   product is saved and the scrape outcome recorded.

resolve_product never raises. Provider and store failures are logged,
reported to Sentry, and recovered from.
"""

import asyncio
import logging
import time
from dataclasses import replace
from decimal import Decimal
from typing import List, Optional, Tuple

from django.conf import settings

from calculator.exceptions import ProviderError, ProviderTimeout, ProviderUnavailable
from calculator.models import Category
from calculator.monitoring import add_provider_breadcrumb, capture_provider_error
from calculator.providers.base import BaseExtractor, load_providers
from calculator.services.classification import classify_product, detect_retailer, normalize_category
from calculator.services.estimation_store import ProductStore, get_product_store_or_null
from calculator.services.learning import FALLBACK_NAME_PREFIX, score_confidence
from calculator.services.shipping import estimate_shipping_cost
from calculator.services.types import (
    METHOD_CACHE,
    METHOD_ERROR_FALLBACK,
    METHOD_FALLBACK,
    Product,
    RawProduct,
)

logger = logging.getLogger(__name__)

DEFAULT_PLACEHOLDER_IMAGE = "https://placehold.co/300x300/7CB342/FFFFFF/png?text=SDL+Import"


def placeholder_image() -> str:
    return getattr(settings, "CALCULATOR_PLACEHOLDER_IMAGE", DEFAULT_PLACEHOLDER_IMAGE)


def build_fallback_product(url: str, method: str = METHOD_FALLBACK) -> Product:
    """
    Build the product returned when nothing could be extracted.

    "error_fallback" products (an exception escaped resolution) are always
    General Merchandise; plain fallbacks are classified from the URL.
    """
    retailer = detect_retailer(url)
    if method == METHOD_ERROR_FALLBACK:
        category = Category.GENERAL.value
    else:
        category = classify_product(None, url)

    product = Product(
        url=url,
        name=f"{FALLBACK_NAME_PREFIX}{retailer}",
        retailer=retailer,
        category=category,
        shipping_cost=estimate_shipping_cost(category, None, None, None),
        scraping_method=method,
        image=placeholder_image(),
        needs_price_confirmation=True,
    )
    product.confidence = score_confidence(product)
    return product


class ScrapeOrchestrator:
    """
    Resolve product URLs through an ordered chain of providers.

    Args:
        providers: Provider instances; defaults to settings.CALCULATOR_PROVIDERS
        store: Estimation store; defaults to the configured backend
    """

    def __init__(
        self,
        providers: Optional[List[BaseExtractor]] = None,
        store: Optional[ProductStore] = None,
    ):
        self.providers = providers if providers is not None else load_providers()

        self.store = store if store is not None else get_product_store_or_null()

        self.cache_threshold = float(getattr(settings, "CALCULATOR_CACHE_CONFIDENCE_THRESHOLD", 0.8))
        self.cache_max_age_days = getattr(settings, "CALCULATOR_CACHE_MAX_AGE_DAYS", 30)

    async def resolve_product(self, url: str) -> Product:
        """
        Resolve a single URL. Never raises.

        Returns:
            Product with category and shipping_cost always set
        """
        try:
            return await self._resolve(url)
        except Exception as e:
            logger.error("Unexpected error resolving %s: %s", url, str(e))
            capture_provider_error(e, provider="orchestrator", url=url)
            return build_fallback_product(url, METHOD_ERROR_FALLBACK)

    async def _resolve(self, url: str) -> Product:
        retailer = detect_retailer(url)
        logger.info("Resolving %s product: %s", retailer, url[:80])

        cached = await self._lookup_cache(url)
        if cached is not None:
            return cached

        raw, method = await self._scrape(url)

        if raw is None:
            product = build_fallback_product(url, METHOD_FALLBACK)
        else:
            product = self._build_product(url, retailer, raw, method)

        if product.weight is None or product.dimensions is None:
            await self._apply_estimation(product)

        product.shipping_cost = estimate_shipping_cost(
            product.category, product.weight, product.price, product.dimensions
        )
        product.needs_price_confirmation = product.price is None or product.scraping_method == METHOD_FALLBACK
        product.confidence = score_confidence(product)

        await self._persist(product)
        return product

    async def _lookup_cache(self, url: str) -> Optional[Product]:
        try:
            known = await self.store.get_known_product(url, max_age_days=self.cache_max_age_days)
        except Exception as e:
            logger.error("Cache lookup failed for %s: %s", url, str(e))
            return None

        if known is None or known.confidence <= self.cache_threshold:
            return None

        logger.info("Cache hit for %s (confidence %.2f)", url, known.confidence)
        try:
            await self.store.record_hit(url)
        except Exception as e:
            logger.error("Failed to record cache hit for %s: %s", url, str(e))

        return replace(
            known,
            scraping_method=METHOD_CACHE,
            shipping_cost=estimate_shipping_cost(known.category, known.weight, known.price, known.dimensions),
            needs_price_confirmation=known.price is None,
        )

    async def _scrape(self, url: str) -> Tuple[Optional[RawProduct], str]:
        """Try providers in order; return the first result with a real name."""
        for provider in self.providers:
            if not provider.is_available():
                logger.debug("Skipping unavailable provider %s", provider.name)
                continue

            add_provider_breadcrumb(provider.name, url, "Provider attempt")
            started = time.monotonic()
            raw = None

            try:
                raw = await asyncio.wait_for(provider.scrape(url), timeout=provider.timeout)
            except ProviderUnavailable as e:
                logger.info("Provider %s unavailable: %s", provider.name, str(e))
                continue
            except asyncio.TimeoutError:
                error = ProviderTimeout(provider.name, f"no response within {provider.timeout}s")
                logger.warning("%s", error)
                add_provider_breadcrumb(provider.name, url, str(error), level="warning")
            except ProviderError as e:
                logger.warning("Provider %s failed for %s: %s", provider.name, url, str(e))
                add_provider_breadcrumb(provider.name, url, str(e), level="warning")
            except Exception as e:
                logger.error("Provider %s raised unexpected error for %s: %s", provider.name, url, str(e))
                capture_provider_error(e, provider=provider.name, url=url)

            elapsed_ms = (time.monotonic() - started) * 1000
            success = raw is not None and raw.has_name
            await self._record_attempt(provider.name, success, elapsed_ms)

            if success:
                logger.info("Provider %s succeeded for %s in %.0fms", provider.name, url, elapsed_ms)
                return raw, provider.name
            if raw is not None:
                logger.info("Provider %s returned no product name for %s", provider.name, url)

        logger.warning("All providers failed for %s, using fallback", url)
        return None, METHOD_FALLBACK

    def _build_product(self, url: str, retailer: str, raw: RawProduct, method: str) -> Product:
        name = raw.name.strip()
        category = normalize_category(raw.category) or classify_product(name, url)
        price = raw.price if raw.price is not None and raw.price > Decimal("0") else None

        return Product(
            url=url,
            name=name,
            retailer=retailer,
            category=category,
            shipping_cost=Decimal("0"),
            scraping_method=method,
            price=price,
            image=raw.image or placeholder_image(),
            weight=raw.weight if raw.weight and raw.weight > 0 else None,
            dimensions=raw.dimensions if raw.dimensions and raw.dimensions.is_valid() else None,
            brand=raw.brand,
            in_stock=raw.in_stock,
        )

    async def _apply_estimation(self, product: Product) -> None:
        """Fill only the missing weight/dimensions from similar products."""
        try:
            estimation = await self.store.get_smart_estimation(product.category, product.name, product.retailer)
        except Exception as e:
            logger.error("Smart estimation failed for %s: %s", product.url, str(e))
            return

        if estimation is None:
            return

        filled = False
        if product.weight is None and estimation.weight:
            product.weight = estimation.weight
            product.weight_estimated = True
            filled = True
        if product.dimensions is None and estimation.dimensions:
            product.dimensions = estimation.dimensions
            product.dimensions_estimated = True
            filled = True

        if filled:
            product.estimation_source = estimation.source
            logger.debug(
                "Estimated attributes for %s from %s (confidence %.2f)",
                product.url, estimation.source, estimation.confidence,
            )

    async def _record_attempt(self, provider: str, success: bool, elapsed_ms: float) -> None:
        try:
            await self.store.record_provider_attempt(provider, success, elapsed_ms)
        except Exception as e:
            logger.error("Failed to record provider attempt for %s: %s", provider, str(e))

    async def _persist(self, product: Product) -> None:
        try:
            await self.store.save_product(product)
        except Exception as e:
            logger.error("Failed to save product %s: %s", product.url, str(e))

        try:
            await self.store.record_scraping_result(
                product.url, product.retailer, product, product.scraping_method
            )
        except Exception as e:
            logger.error("Failed to record scraping result for %s: %s", product.url, str(e))
