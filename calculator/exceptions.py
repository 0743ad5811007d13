"""
Error taxonomy for the import calculator.

Provider and store errors are recovered inside the scrape orchestrator.
InvalidInput is the only error that reaches API callers.
"""


class CalculatorError(Exception):
    """Base class for all calculator errors."""


class ProviderError(CalculatorError):
    """An extraction provider could not produce product data."""

    def __init__(self, provider: str, message: str):
        self.provider = provider
        super().__init__(f"{provider}: {message}")


class ProviderUnavailable(ProviderError):
    """Provider is not configured (missing credentials). Skipped, not a failure."""


class ProviderTimeout(ProviderError):
    """Provider did not answer within its timeout."""


class ProviderFailure(ProviderError):
    """Provider answered with an HTTP error, bad payload or no usable data."""


class StoreUnavailable(CalculatorError):
    """The estimation store is absent or unreachable."""


class InvalidInput(CalculatorError):
    """Malformed request: missing or bad URL list, or batch too large."""
