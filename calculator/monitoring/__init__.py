"""
Monitoring for the import calculator.

- Sentry breadcrumbs for every provider attempt
- Sentry captures for unexpected provider errors and batch item failures
- Sensitive-field filtering (API keys, tokens) on all attached context
"""

from .sentry_integration import add_provider_breadcrumb, capture_provider_error, capture_batch_error

__all__ = [
    "add_provider_breadcrumb",
    "capture_provider_error",
    "capture_batch_error",
]
