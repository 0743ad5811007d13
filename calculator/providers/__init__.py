"""
Product extraction providers.

Each provider turns a product URL into a RawProduct. The orchestrator tries
them in the order given by settings.CALCULATOR_PROVIDERS:

- scrapingbee_ai.py: ScrapingBee AI extraction
- apify_actor.py: Apify web-scraper actor
- html_selector.py: direct fetch with generic CSS selectors
- upcitemdb.py: UPCitemdb product search from the URL slug
"""

from .base import BaseExtractor, load_providers

__all__ = ["BaseExtractor", "load_providers"]
