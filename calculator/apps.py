"""
Calculator application configuration.
"""

from django.apps import AppConfig


class CalculatorConfig(AppConfig):
    """Configuration for the calculator Django application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "calculator"
    verbose_name = "Import Calculator"
