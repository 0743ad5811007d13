import django.core.validators
from django.db import migrations, models


CATEGORY_CHOICES = [
    ("Furniture", "Furniture"),
    ("Home & Garden", "Home & Garden"),
    ("Electronics", "Electronics"),
    ("Kitchen & Dining", "Kitchen & Dining"),
    ("Clothing & Accessories", "Clothing & Accessories"),
    ("Sports & Outdoors", "Sports & Outdoors"),
    ("Tools & Hardware", "Tools & Hardware"),
    ("Beauty & Personal Care", "Beauty & Personal Care"),
    ("Books & Media", "Books & Media"),
    ("Toys & Games", "Toys & Games"),
    ("General Merchandise", "General Merchandise"),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="KnownProduct",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("url", models.URLField(max_length=2000, unique=True)),
                ("name", models.CharField(max_length=500)),
                ("retailer", models.CharField(db_index=True, max_length=100)),
                ("category", models.CharField(choices=CATEGORY_CHOICES, db_index=True, default="General Merchandise", max_length=50)),
                ("price", models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ("weight", models.FloatField(blank=True, help_text="Pounds", null=True)),
                ("length", models.FloatField(blank=True, help_text="Inches", null=True)),
                ("width", models.FloatField(blank=True, help_text="Inches", null=True)),
                ("height", models.FloatField(blank=True, help_text="Inches", null=True)),
                ("image", models.URLField(blank=True, default="", max_length=2000)),
                ("brand", models.CharField(blank=True, default="", max_length=200)),
                ("in_stock", models.BooleanField(default=True)),
                ("scraping_method", models.CharField(max_length=50)),
                ("confidence", models.FloatField(default=0.3, validators=[django.core.validators.MinValueValidator(0.0), django.core.validators.MaxValueValidator(1.0)])),
                ("confirmed", models.BooleanField(default=False)),
                ("weight_estimated", models.BooleanField(default=False)),
                ("dimensions_estimated", models.BooleanField(default=False)),
                ("times_seen", models.PositiveIntegerField(default=1)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "db_table": "known_product",
                "ordering": ["-updated_at"],
                "indexes": [models.Index(fields=["category", "retailer"], name="known_product_cat_ret_idx")],
            },
        ),
        migrations.CreateModel(
            name="CategoryPattern",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("category", models.CharField(choices=CATEGORY_CHOICES, max_length=50, unique=True)),
                ("avg_weight", models.FloatField(default=0.0)),
                ("avg_length", models.FloatField(default=0.0)),
                ("avg_width", models.FloatField(default=0.0)),
                ("avg_height", models.FloatField(default=0.0)),
                ("min_weight", models.FloatField(blank=True, null=True)),
                ("max_weight", models.FloatField(blank=True, null=True)),
                ("min_price", models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ("max_price", models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ("sample_count", models.PositiveIntegerField(default=0)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "db_table": "category_pattern",
            },
        ),
        migrations.CreateModel(
            name="RetailerPattern",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("retailer", models.CharField(max_length=100, unique=True)),
                ("total_attempts", models.PositiveIntegerField(default=0)),
                ("successful_scrapes", models.PositiveIntegerField(default=0)),
                ("success_rate", models.FloatField(default=0.0, help_text="Percentage 0-100")),
                ("best_method", models.CharField(blank=True, default="", max_length=50)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "db_table": "retailer_pattern",
            },
        ),
        migrations.CreateModel(
            name="ScrapingFailure",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("url", models.URLField(max_length=2000)),
                ("retailer", models.CharField(db_index=True, max_length=100)),
                ("scraping_method", models.CharField(max_length=50)),
                ("missing_name", models.BooleanField(default=False)),
                ("missing_price", models.BooleanField(default=False)),
                ("missing_image", models.BooleanField(default=False)),
                ("missing_dimensions", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "db_table": "scraping_failure",
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="ProviderPerformance",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("provider", models.CharField(max_length=50, unique=True)),
                ("total_requests", models.PositiveIntegerField(default=0)),
                ("successful_requests", models.PositiveIntegerField(default=0)),
                ("success_rate", models.FloatField(default=0.0, help_text="Percentage 0-100")),
                ("avg_response_time_ms", models.FloatField(default=0.0)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "db_table": "provider_performance",
                "ordering": ["-success_rate", "avg_response_time_ms"],
            },
        ),
    ]
