"""
Sentry error tracking for product resolution.

The SDK itself is initialised in config/settings/base.py when SENTRY_DSN
is set; without it every call here is a no-op inside sentry_sdk.

Usage:
    from calculator.monitoring import add_provider_breadcrumb, capture_provider_error

    add_provider_breadcrumb("apify", url, "Provider attempt")
    try:
        raw = await provider.scrape(url)
    except Exception as e:
        capture_provider_error(e, provider="apify", url=url)
"""

import logging
from typing import Any, Dict, Optional
from urllib.parse import parse_qsl, urlencode, urlparse, urlunparse

import sentry_sdk

logger = logging.getLogger(__name__)

SENSITIVE_FIELDS = {
    "api_key",
    "apikey",
    "api-key",
    "authorization",
    "auth",
    "password",
    "secret",
    "token",
    "x-api-key",
}


def _is_sensitive(key: str) -> bool:
    key_lower = key.lower()
    return any(sensitive in key_lower for sensitive in SENSITIVE_FIELDS)


def _filter_sensitive_data(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Replace values of sensitive keys with "[Filtered]", recursing into dicts.

    >>> _filter_sensitive_data({"token": "abc", "nested": {"api_key": "x"}, "url": "u"})
    {'token': '[Filtered]', 'nested': {'api_key': '[Filtered]'}, 'url': 'u'}
    """
    if not isinstance(data, dict):
        return data

    filtered = {}
    for key, value in data.items():
        if _is_sensitive(str(key)):
            filtered[key] = "[Filtered]"
        elif isinstance(value, dict):
            filtered[key] = _filter_sensitive_data(value)
        else:
            filtered[key] = value
    return filtered


def _scrub_url(url: Optional[str]) -> Optional[str]:
    """Mask sensitive query parameters (e.g. ?token=...) in a URL."""
    if not url:
        return url
    parsed = urlparse(url)
    if not parsed.query:
        return url
    query = [
        (key, "[Filtered]" if _is_sensitive(key) else value)
        for key, value in parse_qsl(parsed.query, keep_blank_values=True)
    ]
    return urlunparse(parsed._replace(query=urlencode(query)))


def add_provider_breadcrumb(
    provider: str,
    url: str,
    message: str,
    level: str = "info",
    extra_data: Optional[Dict[str, Any]] = None,
) -> None:
    """
    Add a breadcrumb describing a provider step for the current URL.

    Args:
        provider: Provider name (e.g. "scrapingbee_ai")
        url: Product URL being resolved
        message: Description of the step
        level: Sentry level (info, warning, error)
        extra_data: Additional context, filtered for sensitive fields
    """
    data = {"provider": provider, "url": _scrub_url(url)}
    if extra_data:
        data.update(_filter_sensitive_data(extra_data))

    try:
        sentry_sdk.add_breadcrumb(category="scrape", message=message, level=level, data=data)
    except Exception as e:
        logger.warning("Failed to add Sentry breadcrumb: %s", str(e))


def capture_provider_error(
    error: Exception,
    provider: str,
    url: Optional[str] = None,
    extra_context: Optional[Dict[str, Any]] = None,
) -> None:
    """
    Capture an unexpected provider exception with provider and URL tags.

    Expected failures (ProviderError subclasses) should only be breadcrumbs;
    this is for exceptions a provider did not anticipate.
    """
    add_provider_breadcrumb(
        provider=provider,
        url=url or "Unknown",
        message=f"Error: {type(error).__name__}",
        level="error",
        extra_data=extra_context,
    )

    try:
        with sentry_sdk.new_scope() as scope:
            scope.set_tag("calculator.provider", provider)
            if url:
                scope.set_extra("product_url", _scrub_url(url))
            if extra_context:
                scope.set_extra("scrape_context", _filter_sensitive_data(extra_context))
            sentry_sdk.capture_exception(error)
    except Exception as e:
        logger.warning("Failed to capture exception to Sentry: %s", str(e))


def capture_batch_error(error: Exception, url: str, position: int) -> None:
    """Capture an exception that escaped resolution of one batch item."""
    try:
        with sentry_sdk.new_scope() as scope:
            scope.set_tag("calculator.stage", "batch")
            scope.set_extra("product_url", _scrub_url(url))
            scope.set_extra("position", position)
            sentry_sdk.capture_exception(error)
    except Exception as e:
        logger.warning("Failed to capture exception to Sentry: %s", str(e))
