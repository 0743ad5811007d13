"""
URL configuration for the calculator REST API.

Endpoints:
- POST /api/v1/products/resolve/        - Resolve a batch of product URLs
- POST /api/v1/products/confirm-price/  - Confirm a price and recalculate
- GET  /api/v1/insights/                - Learning store statistics
"""

from django.urls import path

from calculator.api.views import confirm_price, insights, resolve_products

app_name = 'calculator_api'

urlpatterns = [
    path('products/resolve/', resolve_products, name='resolve_products'),
    path('products/confirm-price/', confirm_price, name='confirm_price'),
    path('insights/', insights, name='insights'),
]
