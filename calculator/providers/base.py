"""
Base class and loader for extraction providers.
"""

import logging
from abc import ABC, abstractmethod
from typing import List, Optional

from django.conf import settings
from django.utils.module_loading import import_string

from calculator.services.types import RawProduct

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


class BaseExtractor(ABC):
    """
    A source of product data for a URL.

    Subclasses set `name` and implement is_available() and scrape().
    scrape() raises ProviderError subclasses; it never returns None.
    """

    name = "base"

    def __init__(self, timeout: Optional[float] = None):
        timeouts = getattr(settings, "CALCULATOR_PROVIDER_TIMEOUTS", {})
        self.timeout = float(timeout or timeouts.get(self.name, DEFAULT_TIMEOUT))

    @abstractmethod
    def is_available(self) -> bool:
        """True when the provider is configured (credentials present)."""

    @abstractmethod
    async def scrape(self, url: str) -> RawProduct:
        """Extract product data for url."""

    def __repr__(self):
        return f"<{self.__class__.__name__} name={self.name} timeout={self.timeout}>"


def load_providers(paths: Optional[List[str]] = None) -> List[BaseExtractor]:
    """
    Instantiate providers from dotted class paths, in order.

    Args:
        paths: Dotted paths; defaults to settings.CALCULATOR_PROVIDERS

    Returns:
        Provider instances. Paths that fail to import are logged and skipped.
    """
    if paths is None:
        paths = getattr(settings, "CALCULATOR_PROVIDERS", [])

    providers = []
    for path in paths:
        try:
            providers.append(import_string(path)())
        except ImportError as e:
            logger.error("Could not load provider %s: %s", path, str(e))
    return providers
