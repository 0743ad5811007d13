"""
Estimation store: the learning memory of the import calculator.

Backends:
- DatabaseProductStore: Django ORM, wrapped with sync_to_async
- InMemoryProductStore: process-local dicts, for tests and development
- NullProductStore: no persistence, every lookup misses

All backends share the rules in calculator.services.learning. Store
failures never propagate: they are logged and the call degrades to a
miss or a no-op.

Usage:
    store = get_product_store()
    known = await store.get_known_product(url, max_age_days=30)
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import replace
from datetime import timedelta
from decimal import Decimal
from types import SimpleNamespace
from typing import Any, Dict, List, Optional

from asgiref.sync import sync_to_async
from django.conf import settings
from django.db import transaction
from django.db.models import Q, Sum
from django.utils import timezone

from calculator.exceptions import StoreUnavailable
from calculator.models import (
    CategoryPattern,
    KnownProduct,
    ProviderPerformance,
    RetailerPattern,
    ScrapingFailure,
)
from calculator.services.learning import (
    category_averages,
    estimate_from_pattern,
    estimate_from_similar,
    has_extracted_dimensions,
    has_extracted_weight,
    has_real_name,
    hit_confidence,
    merge_for_save,
    missing_fields,
    percentage,
    running_average,
    SIMILAR_MIN_CONFIDENCE,
    SIMILAR_PRODUCTS_LIMIT,
)
from calculator.services.shipping import estimate_shipping_cost
from calculator.services.types import Dimensions, Estimation, Product

logger = logging.getLogger(__name__)

BACKEND_DATABASE = "database"
BACKEND_MEMORY = "memory"
BACKEND_NONE = "none"

TOP_RETAILERS_LIMIT = 5
MAX_MEMORY_FAILURES = 1000


class ProductStore(ABC):
    """Async contract for persisting products and learning from them."""

    backend_name = "abstract"

    def is_available(self) -> bool:
        return True

    @abstractmethod
    async def get_known_product(
        self,
        url: str,
        max_age_days: Optional[int] = None,
        min_confidence: Optional[float] = None,
    ) -> Optional[Product]:
        """Return the stored product for url, or None if absent, stale or too uncertain."""

    @abstractmethod
    async def save_product(self, product: Product, confirmed: bool = False) -> bool:
        """Upsert product by url and update its category pattern."""

    @abstractmethod
    async def record_hit(self, url: str) -> bool:
        """Count a cache hit as an observation: times_seen + 1, confidence + 0.05 (max 1.0)."""

    @abstractmethod
    async def get_smart_estimation(
        self,
        category: str,
        name: str,
        retailer: str,
    ) -> Optional[Estimation]:
        """Estimate weight and dimensions from similar products, then category patterns."""

    @abstractmethod
    async def record_scraping_result(
        self,
        url: str,
        retailer: str,
        product: Product,
        method: str,
    ) -> bool:
        """Update retailer success statistics and log missing fields."""

    @abstractmethod
    async def record_provider_attempt(
        self,
        provider: str,
        success: bool,
        response_time_ms: float,
    ) -> bool:
        """Update per-provider request statistics."""

    @abstractmethod
    async def confirm_price(self, url: str, price: Decimal) -> Optional[Product]:
        """Store a user-confirmed price for a known product; None if url is unknown."""

    @abstractmethod
    async def get_insights(self) -> Dict[str, Any]:
        """Summary statistics for dashboards."""


def _with_shipping(product: Product) -> Product:
    product.shipping_cost = estimate_shipping_cost(
        product.category, product.weight, product.price, product.dimensions
    )
    product.needs_price_confirmation = product.price is None
    return product


def _observe_category(pattern, record: Product, averages: Dict[str, float]) -> None:
    """Apply one saved product to a category pattern (ORM row or namespace)."""
    for field, value in averages.items():
        setattr(pattern, field, value)

    if has_extracted_weight(record):
        pattern.min_weight = record.weight if pattern.min_weight is None else min(pattern.min_weight, record.weight)
        pattern.max_weight = record.weight if pattern.max_weight is None else max(pattern.max_weight, record.weight)
    if record.price is not None:
        pattern.min_price = record.price if pattern.min_price is None else min(pattern.min_price, record.price)
        pattern.max_price = record.price if pattern.max_price is None else max(pattern.max_price, record.price)

    pattern.sample_count += 1


def _observe_retailer(pattern, success: bool, method: str) -> None:
    pattern.total_attempts += 1
    if success:
        pattern.successful_scrapes += 1
        pattern.best_method = method
    pattern.success_rate = percentage(pattern.successful_scrapes, pattern.total_attempts)


def _observe_provider(stats, success: bool, response_time_ms: float) -> None:
    stats.total_requests += 1
    if success:
        stats.successful_requests += 1
    stats.success_rate = percentage(stats.successful_requests, stats.total_requests)
    stats.avg_response_time_ms = running_average(
        stats.avg_response_time_ms, stats.total_requests, response_time_ms
    )


def _scrape_succeeded(product: Product, method: str) -> bool:
    return has_real_name(product) and method not in ("fallback", "error_fallback")


def _estimation_candidates(products: List[Product]) -> List[Product]:
    candidates = [
        p for p in products
        if p.confidence > SIMILAR_MIN_CONFIDENCE
        and (has_extracted_weight(p) or has_extracted_dimensions(p))
    ]
    candidates.sort(key=lambda p: p.times_seen, reverse=True)
    return candidates[:SIMILAR_PRODUCTS_LIMIT]


class InMemoryProductStore(ProductStore):
    """Process-local store with the same semantics as the database backend."""

    backend_name = BACKEND_MEMORY

    def __init__(self):
        self.reset()

    def reset(self) -> None:
        self._products: Dict[str, Product] = {}
        self._updated_at: Dict[str, Any] = {}
        self._category_patterns: Dict[str, SimpleNamespace] = {}
        self._retailer_patterns: Dict[str, SimpleNamespace] = {}
        self._providers: Dict[str, SimpleNamespace] = {}
        self.failures: List[Dict[str, Any]] = []

    async def get_known_product(self, url, max_age_days=None, min_confidence=None):
        record = self._products.get(url)
        if record is None:
            return None
        if max_age_days is not None and self._updated_at[url] < timezone.now() - timedelta(days=max_age_days):
            return None
        if min_confidence is not None and record.confidence < min_confidence:
            return None
        return _with_shipping(replace(record))

    async def save_product(self, product, confirmed=False):
        record = merge_for_save(self._products.get(product.url), product, confirmed)
        self._products[product.url] = record
        self._updated_at[product.url] = timezone.now()

        if not product.is_fallback:
            pattern = self._category_patterns.setdefault(
                record.category,
                SimpleNamespace(
                    avg_weight=0.0, avg_length=0.0, avg_width=0.0, avg_height=0.0,
                    min_weight=None, max_weight=None, min_price=None, max_price=None,
                    sample_count=0,
                ),
            )
            in_category = [p for p in self._products.values() if p.category == record.category]
            _observe_category(pattern, record, category_averages(in_category))

        logger.debug("Saved %s (confidence %.2f, seen %d)", product.url, record.confidence, record.times_seen)
        return True

    async def record_hit(self, url):
        record = self._products.get(url)
        if record is None:
            return False
        record.times_seen += 1
        record.confidence = hit_confidence(record.confidence)
        return True

    async def get_smart_estimation(self, category, name, retailer):
        similar = _estimation_candidates([
            p for p in self._products.values()
            if p.category == category and p.retailer == retailer
        ])
        estimation = estimate_from_similar(similar)
        if estimation:
            return estimation

        pattern = self._category_patterns.get(category)
        if pattern is None:
            return None
        return estimate_from_pattern(
            pattern.sample_count, pattern.avg_weight,
            pattern.avg_length, pattern.avg_width, pattern.avg_height,
        )

    async def record_scraping_result(self, url, retailer, product, method):
        pattern = self._retailer_patterns.setdefault(
            retailer,
            SimpleNamespace(total_attempts=0, successful_scrapes=0, success_rate=0.0, best_method=""),
        )
        _observe_retailer(pattern, _scrape_succeeded(product, method), method)

        missing = missing_fields(product)
        if any(missing.values()):
            self.failures.append({"url": url, "retailer": retailer, "scraping_method": method, **missing})
            del self.failures[:-MAX_MEMORY_FAILURES]
        return True

    async def record_provider_attempt(self, provider, success, response_time_ms):
        stats = self._providers.setdefault(
            provider,
            SimpleNamespace(total_requests=0, successful_requests=0, success_rate=0.0, avg_response_time_ms=0.0),
        )
        _observe_provider(stats, success, response_time_ms)
        return True

    async def confirm_price(self, url, price):
        existing = self._products.get(url)
        if existing is None:
            return None
        await self.save_product(replace(existing, price=price), confirmed=True)
        return await self.get_known_product(url)

    async def get_insights(self):
        retailers = sorted(self._retailer_patterns.items(), key=lambda item: item[1].total_attempts, reverse=True)
        total = sum(p.total_attempts for p in self._retailer_patterns.values())
        successful = sum(p.successful_scrapes for p in self._retailer_patterns.values())
        return {
            "backend": self.backend_name,
            "total_products": len(self._products),
            "total_scrapes": total,
            "successful_scrapes": successful,
            "success_rate": percentage(successful, total),
            "recent_failures": len(self.failures),
            "top_retailers": [
                {"retailer": name, **vars(pattern)}
                for name, pattern in retailers[:TOP_RETAILERS_LIMIT]
            ],
            "providers": [
                {"provider": name, **vars(stats)}
                for name, stats in sorted(self._providers.items())
            ],
        }


class DatabaseProductStore(ProductStore):
    """
    Django ORM store.

    Every public coroutine delegates to a `_*_sync` method run through
    sync_to_async. Database errors are logged and turned into a miss.
    """

    backend_name = BACKEND_DATABASE

    def is_available(self) -> bool:
        return "default" in settings.DATABASES

    async def _call(self, func, *args, default=None):
        try:
            return await sync_to_async(func, thread_sensitive=True)(*args)
        except Exception as e:
            logger.error("Estimation store %s failed: %s", func.__name__, str(e))
            return default

    @staticmethod
    def _row_to_product(row: KnownProduct) -> Product:
        product = Product(
            url=row.url,
            name=row.name,
            retailer=row.retailer,
            category=row.category,
            shipping_cost=Decimal("0"),
            scraping_method=row.scraping_method,
            price=row.price,
            image=row.image or None,
            weight=row.weight,
            dimensions=Dimensions.from_values(row.length, row.width, row.height),
            brand=row.brand or None,
            in_stock=row.in_stock,
            confidence=row.confidence,
            times_seen=row.times_seen,
            confirmed=row.confirmed,
            weight_estimated=row.weight_estimated,
            dimensions_estimated=row.dimensions_estimated,
        )
        return _with_shipping(product)

    @staticmethod
    def _row_fields(record: Product) -> Dict[str, Any]:
        dims = record.dimensions
        return {
            "name": record.name[:500],
            "retailer": record.retailer,
            "category": record.category,
            "price": record.price,
            "weight": record.weight,
            "length": dims.length if dims else None,
            "width": dims.width if dims else None,
            "height": dims.height if dims else None,
            "image": record.image or "",
            "brand": record.brand or "",
            "in_stock": record.in_stock,
            "scraping_method": record.scraping_method,
            "confidence": record.confidence,
            "confirmed": record.confirmed,
            "weight_estimated": record.weight_estimated,
            "dimensions_estimated": record.dimensions_estimated,
            "times_seen": record.times_seen,
        }

    # Sync implementations

    def _get_known_product_sync(self, url, max_age_days=None, min_confidence=None):
        rows = KnownProduct.objects.filter(url=url)
        if max_age_days is not None:
            rows = rows.filter(updated_at__gte=timezone.now() - timedelta(days=max_age_days))
        if min_confidence is not None:
            rows = rows.filter(confidence__gte=min_confidence)
        row = rows.first()
        return self._row_to_product(row) if row else None

    def _save_product_sync(self, product, confirmed=False):
        with transaction.atomic():
            row = KnownProduct.objects.select_for_update().filter(url=product.url).first()
            existing = self._row_to_product(row) if row else None
            record = merge_for_save(existing, product, confirmed)
            KnownProduct.objects.update_or_create(url=product.url, defaults=self._row_fields(record))

            if not product.is_fallback:
                self._update_category_pattern_sync(record)

        logger.debug("Saved %s (confidence %.2f, seen %d)", product.url, record.confidence, record.times_seen)
        return True

    def _record_hit_sync(self, url):
        with transaction.atomic():
            row = KnownProduct.objects.select_for_update().filter(url=url).first()
            if row is None:
                return False
            # update() bypasses auto_now; hits do not move updated_at
            KnownProduct.objects.filter(pk=row.pk).update(
                times_seen=row.times_seen + 1,
                confidence=hit_confidence(row.confidence),
            )
        return True

    def _update_category_pattern_sync(self, record: Product) -> None:
        pattern, _ = CategoryPattern.objects.select_for_update().get_or_create(category=record.category)
        rows = KnownProduct.objects.filter(category=record.category).filter(
            Q(weight_estimated=False, weight__gt=0)
            | Q(dimensions_estimated=False, length__gt=0, width__gt=0, height__gt=0)
        )
        in_category = [self._row_to_product(row) for row in rows]
        _observe_category(pattern, record, category_averages(in_category))
        pattern.save()

    def _get_smart_estimation_sync(self, category, name, retailer):
        rows = (
            KnownProduct.objects.filter(
                category=category,
                retailer=retailer,
                confidence__gt=SIMILAR_MIN_CONFIDENCE,
            )
            .filter(
                Q(weight_estimated=False, weight__gt=0)
                | Q(dimensions_estimated=False, length__gt=0, width__gt=0, height__gt=0)
            )
            .order_by("-times_seen", "-updated_at")[:SIMILAR_PRODUCTS_LIMIT]
        )
        estimation = estimate_from_similar(_estimation_candidates([self._row_to_product(r) for r in rows]))
        if estimation:
            return estimation

        pattern = CategoryPattern.objects.filter(category=category).first()
        if pattern is None:
            return None
        return estimate_from_pattern(
            pattern.sample_count, pattern.avg_weight,
            pattern.avg_length, pattern.avg_width, pattern.avg_height,
        )

    def _record_scraping_result_sync(self, url, retailer, product, method):
        with transaction.atomic():
            pattern, _ = RetailerPattern.objects.select_for_update().get_or_create(retailer=retailer)
            _observe_retailer(pattern, _scrape_succeeded(product, method), method)
            pattern.save()

        missing = missing_fields(product)
        if any(missing.values()):
            ScrapingFailure.objects.create(
                url=url,
                retailer=retailer,
                scraping_method=method,
                **missing,
            )
        return True

    def _record_provider_attempt_sync(self, provider, success, response_time_ms):
        with transaction.atomic():
            stats, _ = ProviderPerformance.objects.select_for_update().get_or_create(provider=provider)
            _observe_provider(stats, success, response_time_ms)
            stats.save()
        return True

    def _confirm_price_sync(self, url, price):
        existing = self._get_known_product_sync(url)
        if existing is None:
            return None
        self._save_product_sync(replace(existing, price=price), confirmed=True)
        return self._get_known_product_sync(url)

    def _get_insights_sync(self):
        totals = RetailerPattern.objects.aggregate(
            total=Sum("total_attempts"),
            successful=Sum("successful_scrapes"),
        )
        total = totals["total"] or 0
        successful = totals["successful"] or 0
        return {
            "backend": self.backend_name,
            "total_products": KnownProduct.objects.count(),
            "total_scrapes": total,
            "successful_scrapes": successful,
            "success_rate": percentage(successful, total),
            "recent_failures": ScrapingFailure.objects.filter(
                created_at__gte=timezone.now() - timedelta(days=7)
            ).count(),
            "top_retailers": list(
                RetailerPattern.objects.order_by("-total_attempts").values(
                    "retailer", "total_attempts", "successful_scrapes", "success_rate", "best_method"
                )[:TOP_RETAILERS_LIMIT]
            ),
            "providers": list(
                ProviderPerformance.objects.order_by("provider").values(
                    "provider", "total_requests", "successful_requests", "success_rate", "avg_response_time_ms"
                )
            ),
        }

    # Async contract

    async def get_known_product(self, url, max_age_days=None, min_confidence=None):
        return await self._call(self._get_known_product_sync, url, max_age_days, min_confidence)

    async def save_product(self, product, confirmed=False):
        return await self._call(self._save_product_sync, product, confirmed, default=False)

    async def record_hit(self, url):
        return await self._call(self._record_hit_sync, url, default=False)

    async def get_smart_estimation(self, category, name, retailer):
        return await self._call(self._get_smart_estimation_sync, category, name, retailer)

    async def record_scraping_result(self, url, retailer, product, method):
        return await self._call(self._record_scraping_result_sync, url, retailer, product, method, default=False)

    async def record_provider_attempt(self, provider, success, response_time_ms):
        return await self._call(self._record_provider_attempt_sync, provider, success, response_time_ms, default=False)

    async def confirm_price(self, url, price):
        return await self._call(self._confirm_price_sync, url, price)

    async def get_insights(self):
        return await self._call(self._get_insights_sync, default={"backend": self.backend_name})


class NullProductStore(ProductStore):
    """Store that remembers nothing."""

    backend_name = BACKEND_NONE

    def is_available(self) -> bool:
        return False

    async def get_known_product(self, url, max_age_days=None, min_confidence=None):
        return None

    async def save_product(self, product, confirmed=False):
        return False

    async def record_hit(self, url):
        return False

    async def get_smart_estimation(self, category, name, retailer):
        return None

    async def record_scraping_result(self, url, retailer, product, method):
        return False

    async def record_provider_attempt(self, provider, success, response_time_ms):
        return False

    async def confirm_price(self, url, price):
        return None

    async def get_insights(self):
        return {"backend": self.backend_name}


_memory_store: Optional[InMemoryProductStore] = None


def get_memory_store() -> InMemoryProductStore:
    """Process-wide in-memory store, so learning survives across requests."""
    global _memory_store
    if _memory_store is None:
        _memory_store = InMemoryProductStore()
    return _memory_store


def get_product_store(backend: Optional[str] = None) -> ProductStore:
    """
    Build the configured store backend.

    Args:
        backend: "database", "memory" or "none"; defaults to
            settings.CALCULATOR_STORE_BACKEND

    Raises:
        StoreUnavailable: for an unknown backend name
    """
    backend = (backend or getattr(settings, "CALCULATOR_STORE_BACKEND", BACKEND_DATABASE)).lower()

    if backend == BACKEND_DATABASE:
        return DatabaseProductStore()
    if backend == BACKEND_MEMORY:
        return get_memory_store()
    if backend == BACKEND_NONE:
        return NullProductStore()

    raise StoreUnavailable(f"Unknown estimation store backend: {backend}")


def get_product_store_or_null() -> ProductStore:
    """Configured store, or a NullProductStore if it cannot be built."""
    try:
        return get_product_store()
    except StoreUnavailable as e:
        logger.warning("Estimation store unavailable, continuing without it: %s", str(e))
        return NullProductStore()
