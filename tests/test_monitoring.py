"""
Tests for Sentry integration helpers.
"""

from unittest.mock import patch

from calculator.monitoring import add_provider_breadcrumb, capture_batch_error, capture_provider_error
from calculator.monitoring.sentry_integration import _filter_sensitive_data, _scrub_url


class TestSensitiveDataFiltering:

    def test_filters_nested_keys(self):
        data = {"Authorization": "Bearer x", "context": {"api_key": "k", "status": 500}, "url": "u"}

        assert _filter_sensitive_data(data) == {
            "Authorization": "[Filtered]",
            "context": {"api_key": "[Filtered]", "status": 500},
            "url": "u",
        }

    def test_scrubs_query_tokens(self):
        url = "https://api.apify.com/v2/acts/x/run?token=secret&clean=1"

        scrubbed = _scrub_url(url)

        assert "secret" not in scrubbed
        assert "clean=1" in scrubbed

    def test_plain_url_unchanged(self):
        url = "https://www.amazon.com/dp/B08N5WRWNW"
        assert _scrub_url(url) == url


class TestSentryCalls:

    def test_breadcrumb(self):
        with patch("calculator.monitoring.sentry_integration.sentry_sdk") as sdk:
            add_provider_breadcrumb("apify", "https://x.com/p?token=t", "Provider attempt", extra_data={"secret": "s"})

        kwargs = sdk.add_breadcrumb.call_args.kwargs
        assert kwargs["category"] == "scrape"
        assert kwargs["data"]["provider"] == "apify"
        assert kwargs["data"]["secret"] == "[Filtered]"
        assert kwargs["data"]["url"] == "https://x.com/p?token=%5BFiltered%5D"

    def test_capture_tags_provider(self):
        error = RuntimeError("boom")

        with patch("calculator.monitoring.sentry_integration.sentry_sdk") as sdk:
            capture_provider_error(error, provider="html_selector", url="https://x.com/p")

        scope = sdk.new_scope.return_value.__enter__.return_value
        scope.set_tag.assert_called_with("calculator.provider", "html_selector")
        sdk.capture_exception.assert_called_once_with(error)

    def test_capture_batch_error_records_position(self):
        error = ValueError("bad")

        with patch("calculator.monitoring.sentry_integration.sentry_sdk") as sdk:
            capture_batch_error(error, "https://x.com/p", 4)

        scope = sdk.new_scope.return_value.__enter__.return_value
        scope.set_tag.assert_called_once_with("calculator.stage", "batch")
        scope.set_extra.assert_any_call("position", 4)
        sdk.capture_exception.assert_called_once_with(error)
