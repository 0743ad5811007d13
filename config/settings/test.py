"""
Test settings for the Bermuda Import Calculator service.

Uses in-memory SQLite and eager Celery for fast test execution.
"""

from .base import *

# Test mode
DEBUG = False

ALLOWED_HOSTS = ["localhost", "127.0.0.1", "testserver"]

# Test database - in-memory SQLite for speed
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

# Test Cache - use local memory cache
CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "unique-snowflake",
    }
}

# Test Celery - run tasks synchronously
CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True

# Test logging - minimal output
LOGGING["loggers"]["django"]["level"] = "WARNING"
LOGGING["loggers"]["calculator"]["level"] = "WARNING"

# Use faster password hasher for tests
PASSWORD_HASHERS = [
    "django.contrib.auth.hashers.MD5PasswordHasher",
]

# Disable Sentry in tests
SENTRY_DSN = ""

# No provider credentials in tests - every provider reports unavailable
SCRAPINGBEE_API_KEY = ""
APIFY_API_TOKEN = ""
UPCITEMDB_API_KEY = ""

# Test calculator settings - no pacing between batch groups
CALCULATOR_STORE_BACKEND = "memory"
CALCULATOR_BATCH_PACING_SECONDS = 0

# No outbound HTTP from tests; tests inject fake providers
CALCULATOR_PROVIDERS = []
