"""
Django base settings for the Bermuda Import Calculator service.

This module contains settings common to all environments.
For more information on this file, see
https://docs.djangoproject.com/en/4.2/topics/settings/
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# Build paths inside the project like this: BASE_DIR / 'subdir'.
BASE_DIR = Path(__file__).resolve().parent.parent.parent


# Quick-start development settings - unsuitable for production
# See https://docs.djangoproject.com/en/4.2/howto/deployment/checklist/

# SECURITY WARNING: keep the secret key used in production secret!
SECRET_KEY = os.getenv(
    "SECRET_KEY",
    "django-insecure-calculator-dev-key-change-in-production"
)

# SECURITY WARNING: don't run with debug turned on in production!
DEBUG = os.getenv("DEBUG", "True") == "True"

ALLOWED_HOSTS = os.getenv("ALLOWED_HOSTS", "localhost,127.0.0.1").split(",")


# Application definition

INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    # Third-party apps
    "rest_framework",
    "drf_spectacular",
    # Local apps
    "calculator",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "config.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.debug",
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    },
]


# Database
# https://docs.djangoproject.com/en/4.2/ref/settings/#databases
# Configured in environment-specific settings (development.py, production.py, test.py)

DATABASES = {
    # Override in environment-specific settings
}


# Internationalization
# https://docs.djangoproject.com/en/4.2/topics/i18n/

LANGUAGE_CODE = "en-us"

TIME_ZONE = "UTC"

USE_I18N = True

USE_TZ = True


# Static files (CSS, JavaScript, Images)
# https://docs.djangoproject.com/en/4.2/howto/static-files/

STATIC_URL = "static/"
STATIC_ROOT = BASE_DIR / "staticfiles"

# Default primary key field type
# https://docs.djangoproject.com/en/4.2/ref/settings/#default-auto-field

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"


# Cache Configuration
# https://docs.djangoproject.com/en/4.2/topics/cache/
# Configured in environment-specific settings

CACHES = {
    # Override in environment-specific settings
}


# Celery Configuration
# https://docs.celeryproject.org/en/stable/django/first-steps-with-django.html

CELERY_BROKER_URL = os.getenv("CELERY_BROKER_URL", "redis://localhost:6379/1")
CELERY_RESULT_BACKEND = os.getenv("CELERY_RESULT_BACKEND", "redis://localhost:6379/1")
CELERY_ACCEPT_CONTENT = ["json"]
CELERY_TASK_SERIALIZER = "json"
CELERY_RESULT_SERIALIZER = "json"
CELERY_TIMEZONE = TIME_ZONE
CELERY_TASK_TRACK_STARTED = True
CELERY_TASK_TIME_LIMIT = 10 * 60  # 10 minutes max for a batch

CELERY_TASK_ROUTES = {
    "calculator.tasks.resolve_products_task": {"queue": "scrape"},
}


# Django REST Framework Configuration
# https://www.django-rest-framework.org/

REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": [
        "rest_framework.authentication.SessionAuthentication",
    ],
    "DEFAULT_PERMISSION_CLASSES": [
        "rest_framework.permissions.AllowAny",
    ],
    "DEFAULT_SCHEMA_CLASS": "drf_spectacular.openapi.AutoSchema",
}


# DRF Spectacular (OpenAPI/Swagger) Configuration
# https://drf-spectacular.readthedocs.io/

SPECTACULAR_SETTINGS = {
    "TITLE": "Bermuda Import Calculator API",
    "DESCRIPTION": "Product lookup and shipping estimation for Bermuda imports",
    "VERSION": "1.0.0",
    "SERVE_INCLUDE_SCHEMA": False,
}


# Logging Configuration
# https://docs.djangoproject.com/en/4.2/topics/logging/

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {
            "format": "{levelname} {asctime} {module} {message}",
            "style": "{",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "verbose",
        },
    },
    "loggers": {
        "django": {
            "handlers": ["console"],
            "level": os.getenv("LOG_LEVEL", "INFO"),
        },
        "calculator": {
            "handlers": ["console"],
            "level": os.getenv("LOG_LEVEL", "INFO"),
        },
    },
}


# External API Configuration

# ScrapingBee (AI extraction provider)
SCRAPINGBEE_API_KEY = os.getenv("SCRAPINGBEE_API_KEY", "")

# Apify (managed browser actor provider)
APIFY_API_TOKEN = os.getenv("APIFY_API_TOKEN", "")

# UPCitemdb (barcode database provider)
UPCITEMDB_API_KEY = os.getenv("UPCITEMDB_API_KEY", "")


# Sentry Configuration
# https://docs.sentry.io/platforms/python/guides/django/

SENTRY_DSN = os.getenv("SENTRY_DSN", "")
SENTRY_ENVIRONMENT = os.getenv("SENTRY_ENVIRONMENT", "development")
SENTRY_TRACES_SAMPLE_RATE = float(os.getenv("SENTRY_TRACES_SAMPLE_RATE", "0.2"))

if SENTRY_DSN:
    import sentry_sdk

    sentry_sdk.init(
        dsn=SENTRY_DSN,
        send_default_pii=False,
        traces_sample_rate=SENTRY_TRACES_SAMPLE_RATE,
        environment=SENTRY_ENVIRONMENT,
    )


# Calculator Configuration

# Extraction providers, tried in this order (first usable result wins)
CALCULATOR_PROVIDERS = [
    "calculator.providers.scrapingbee_ai.ScrapingBeeAIExtractor",
    "calculator.providers.apify_actor.ApifyActorExtractor",
    "calculator.providers.html_selector.HtmlSelectorExtractor",
    "calculator.providers.upcitemdb.UPCItemDBExtractor",
]

# Per-provider timeouts (seconds)
CALCULATOR_PROVIDER_TIMEOUTS = {
    "scrapingbee_ai": float(os.getenv("SCRAPINGBEE_TIMEOUT", "30")),
    "apify": float(os.getenv("APIFY_TIMEOUT", "60")),
    "html_selector": float(os.getenv("HTML_SELECTOR_TIMEOUT", "15")),
    "upcitemdb": float(os.getenv("UPCITEMDB_TIMEOUT", "10")),
}

# Estimation store backend: "database", "memory" or "none"
CALCULATOR_STORE_BACKEND = os.getenv("CALCULATOR_STORE_BACKEND", "database")

# Cached products above this confidence skip scraping entirely
CALCULATOR_CACHE_CONFIDENCE_THRESHOLD = float(
    os.getenv("CALCULATOR_CACHE_CONFIDENCE_THRESHOLD", "0.8")
)

# Only cached products updated within this many days are considered
CALCULATOR_CACHE_MAX_AGE_DAYS = int(os.getenv("CALCULATOR_CACHE_MAX_AGE_DAYS", "30"))

# Batch limits and pacing
CALCULATOR_MAX_BATCH_SIZE = int(os.getenv("CALCULATOR_MAX_BATCH_SIZE", "20"))
CALCULATOR_BATCH_GROUP_SIZE = int(os.getenv("CALCULATOR_BATCH_GROUP_SIZE", "3"))
CALCULATOR_BATCH_PACING_SECONDS = float(
    os.getenv("CALCULATOR_BATCH_PACING_SECONDS", "1.0")
)

# Shipping estimation
CALCULATOR_DEFAULT_PRICE_ESTIMATE = "50.00"
CALCULATOR_SHIPPING_COST_FLOOR = "10.00"
CALCULATOR_SHIPPING_COST_CEILING = "2500.00"
CALCULATOR_LANDED_MARGIN_RATE = "0.25"

CALCULATOR_PLACEHOLDER_IMAGE = (
    "https://placehold.co/300x300/7CB342/FFFFFF/png?text=SDL+Import"
)
