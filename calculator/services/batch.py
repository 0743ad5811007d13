"""
Batch resolution of product URLs.

URLs are validated up front, then resolved in small concurrent groups
with a pause between groups to stay under provider rate limits. Results
keep the input order.
"""

import asyncio
import logging
from typing import Any, List, Optional
from urllib.parse import urlparse

from django.conf import settings

from calculator.exceptions import InvalidInput
from calculator.monitoring import capture_batch_error
from calculator.services.orchestrator import ScrapeOrchestrator, build_fallback_product
from calculator.services.types import METHOD_ERROR_FALLBACK, Product

logger = logging.getLogger(__name__)


def is_http_url(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    try:
        parsed = urlparse(value.strip())
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def validate_urls(urls: Any, max_batch_size: Optional[int] = None) -> List[str]:
    """
    Check a batch request and return the stripped URLs.

    Raises:
        InvalidInput: urls is not a non-empty list, is larger than the
            batch limit, or contains anything but http(s) URLs
    """
    if max_batch_size is None:
        max_batch_size = getattr(settings, "CALCULATOR_MAX_BATCH_SIZE", 20)

    if not isinstance(urls, (list, tuple)):
        raise InvalidInput("urls must be a list")
    if not urls:
        raise InvalidInput("urls must not be empty")
    if len(urls) > max_batch_size:
        raise InvalidInput(f"Maximum {max_batch_size} URLs per batch")

    invalid = [url for url in urls if not is_http_url(url)]
    if invalid:
        raise InvalidInput(f"Invalid URL: {str(invalid[0])[:200]}")

    return [url.strip() for url in urls]


class BatchCoordinator:
    """
    Resolve a list of URLs with bounded concurrency.

    Args:
        orchestrator: ScrapeOrchestrator to resolve each URL
        group_size: URLs resolved concurrently per group
        pacing_seconds: Pause between groups (not after the last)
        max_batch_size: Largest accepted batch
    """

    def __init__(
        self,
        orchestrator: Optional[ScrapeOrchestrator] = None,
        group_size: Optional[int] = None,
        pacing_seconds: Optional[float] = None,
        max_batch_size: Optional[int] = None,
    ):
        self.orchestrator = orchestrator or ScrapeOrchestrator()
        self.group_size = max(1, group_size or getattr(settings, "CALCULATOR_BATCH_GROUP_SIZE", 3))
        if pacing_seconds is None:
            pacing_seconds = getattr(settings, "CALCULATOR_BATCH_PACING_SECONDS", 1.0)
        self.pacing_seconds = pacing_seconds
        self.max_batch_size = max_batch_size or getattr(settings, "CALCULATOR_MAX_BATCH_SIZE", 20)

    async def resolve_products(self, urls: List[str]) -> List[Product]:
        """
        Resolve every URL; result i corresponds to urls[i].

        Raises:
            InvalidInput: before any provider call, if the batch is malformed
        """
        urls = validate_urls(urls, self.max_batch_size)
        logger.info("Resolving batch of %d URLs", len(urls))

        results: List[Product] = []
        for start in range(0, len(urls), self.group_size):
            group = urls[start:start + self.group_size]
            outcomes = await asyncio.gather(
                *(self.orchestrator.resolve_product(url) for url in group),
                return_exceptions=True,
            )

            for offset, (url, outcome) in enumerate(zip(group, outcomes)):
                if isinstance(outcome, Exception):
                    logger.error("Resolution of %s failed: %s", url, str(outcome))
                    capture_batch_error(outcome, url, start + offset)
                    outcome = build_fallback_product(url, METHOD_ERROR_FALLBACK)
                elif isinstance(outcome, BaseException):
                    raise outcome
                results.append(outcome)

            if start + self.group_size < len(urls) and self.pacing_seconds > 0:
                await asyncio.sleep(self.pacing_seconds)

        return results
