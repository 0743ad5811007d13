"""
Django admin configuration for the calculator's learning store.

Read-mostly views over known products and the aggregates kept beside them.
"""

from django.contrib import admin

from calculator.models import (
    CategoryPattern,
    KnownProduct,
    ProviderPerformance,
    RetailerPattern,
    ScrapingFailure,
)


@admin.register(KnownProduct)
class KnownProductAdmin(admin.ModelAdmin):
    list_display = [
        "name",
        "retailer",
        "category",
        "price",
        "confidence",
        "confirmed",
        "times_seen",
        "scraping_method",
        "updated_at",
    ]
    list_filter = ["retailer", "category", "confirmed", "scraping_method"]
    search_fields = ["name", "url", "brand"]
    readonly_fields = ["created_at", "updated_at", "times_seen"]
    ordering = ["-updated_at"]


@admin.register(CategoryPattern)
class CategoryPatternAdmin(admin.ModelAdmin):
    list_display = ["category", "avg_weight", "avg_length", "avg_width", "avg_height", "sample_count", "updated_at"]
    readonly_fields = ["updated_at"]


@admin.register(RetailerPattern)
class RetailerPatternAdmin(admin.ModelAdmin):
    list_display = ["retailer", "total_attempts", "successful_scrapes", "success_rate", "best_method", "updated_at"]
    ordering = ["-total_attempts"]


@admin.register(ScrapingFailure)
class ScrapingFailureAdmin(admin.ModelAdmin):
    list_display = [
        "retailer",
        "scraping_method",
        "missing_name",
        "missing_price",
        "missing_image",
        "missing_dimensions",
        "created_at",
    ]
    list_filter = ["retailer", "scraping_method"]
    search_fields = ["url"]


@admin.register(ProviderPerformance)
class ProviderPerformanceAdmin(admin.ModelAdmin):
    list_display = ["provider", "total_requests", "success_rate", "avg_response_time_ms", "updated_at"]
