"""
Django models for the Import Calculator.

Models: KnownProduct, CategoryPattern, RetailerPattern, ScrapingFailure,
        ProviderPerformance

KnownProduct is the learning store keyed by URL. The pattern models are
aggregates maintained alongside it: CategoryPattern feeds weight and
dimension estimation, the rest exist for observability.
"""

from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models


class Category(models.TextChoices):
    """Merchandise categories used for shipping estimation."""

    FURNITURE = "Furniture", "Furniture"
    HOME_GARDEN = "Home & Garden", "Home & Garden"
    ELECTRONICS = "Electronics", "Electronics"
    KITCHEN_DINING = "Kitchen & Dining", "Kitchen & Dining"
    CLOTHING = "Clothing & Accessories", "Clothing & Accessories"
    SPORTS_OUTDOORS = "Sports & Outdoors", "Sports & Outdoors"
    TOOLS_HARDWARE = "Tools & Hardware", "Tools & Hardware"
    BEAUTY = "Beauty & Personal Care", "Beauty & Personal Care"
    BOOKS_MEDIA = "Books & Media", "Books & Media"
    TOYS_GAMES = "Toys & Games", "Toys & Games"
    GENERAL = "General Merchandise", "General Merchandise"


class KnownProduct(models.Model):
    """
    A product observed at a URL.

    Upserted on every scrape of the same URL. Confidence never decreases:
    it is raised by richer extractions and set to 1.0 by user confirmation.
    Weight and dimensions filled in by estimation are flagged so they
    never feed back into the aggregates.
    """

    url = models.URLField(max_length=2000, unique=True)
    name = models.CharField(max_length=500)
    retailer = models.CharField(max_length=100, db_index=True)
    category = models.CharField(
        max_length=50,
        choices=Category.choices,
        default=Category.GENERAL,
        db_index=True,
    )
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
    )
    weight = models.FloatField(null=True, blank=True, help_text="Pounds")
    length = models.FloatField(null=True, blank=True, help_text="Inches")
    width = models.FloatField(null=True, blank=True, help_text="Inches")
    height = models.FloatField(null=True, blank=True, help_text="Inches")
    image = models.URLField(max_length=2000, blank=True, default="")
    brand = models.CharField(max_length=200, blank=True, default="")
    in_stock = models.BooleanField(default=True)
    scraping_method = models.CharField(max_length=50)
    confidence = models.FloatField(
        default=0.3,
        validators=[MinValueValidator(0.0), MaxValueValidator(1.0)],
    )
    confirmed = models.BooleanField(default=False)
    weight_estimated = models.BooleanField(default=False)
    dimensions_estimated = models.BooleanField(default=False)
    times_seen = models.PositiveIntegerField(default=1)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "known_product"
        ordering = ["-updated_at"]
        indexes = [
            models.Index(fields=["category", "retailer"], name="known_product_cat_ret_idx"),
        ]

    def __str__(self):
        return f"{self.name} ({self.retailer})"


class CategoryPattern(models.Model):
    """
    Typical physical attributes for a category.

    Averages are trimmed means over the extracted (non-estimated) products
    stored for the category. Created lazily on the first product of a
    category, never deleted.
    """

    category = models.CharField(max_length=50, choices=Category.choices, unique=True)
    avg_weight = models.FloatField(default=0.0)
    avg_length = models.FloatField(default=0.0)
    avg_width = models.FloatField(default=0.0)
    avg_height = models.FloatField(default=0.0)
    min_weight = models.FloatField(null=True, blank=True)
    max_weight = models.FloatField(null=True, blank=True)
    min_price = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    max_price = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    sample_count = models.PositiveIntegerField(default=0)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "category_pattern"

    def __str__(self):
        return f"{self.category} ({self.sample_count} samples)"


class RetailerPattern(models.Model):
    """Scrape success rate and best-performing method per retailer."""

    retailer = models.CharField(max_length=100, unique=True)
    total_attempts = models.PositiveIntegerField(default=0)
    successful_scrapes = models.PositiveIntegerField(default=0)
    success_rate = models.FloatField(default=0.0, help_text="Percentage 0-100")
    best_method = models.CharField(max_length=50, blank=True, default="")
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "retailer_pattern"

    def __str__(self):
        return f"{self.retailer}: {self.success_rate:.1f}%"


class ScrapingFailure(models.Model):
    """A scrape attempt that ended with one or more fields missing."""

    url = models.URLField(max_length=2000)
    retailer = models.CharField(max_length=100, db_index=True)
    scraping_method = models.CharField(max_length=50)
    missing_name = models.BooleanField(default=False)
    missing_price = models.BooleanField(default=False)
    missing_image = models.BooleanField(default=False)
    missing_dimensions = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "scraping_failure"
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.retailer} via {self.scraping_method} at {self.created_at}"


class ProviderPerformance(models.Model):
    """Per-provider request counts and average response time."""

    provider = models.CharField(max_length=50, unique=True)
    total_requests = models.PositiveIntegerField(default=0)
    successful_requests = models.PositiveIntegerField(default=0)
    success_rate = models.FloatField(default=0.0, help_text="Percentage 0-100")
    avg_response_time_ms = models.FloatField(default=0.0)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "provider_performance"
        ordering = ["-success_rate", "avg_response_time_ms"]

    def __str__(self):
        return f"{self.provider}: {self.success_rate:.1f}%"
