"""
Calculator views outside the versioned API.

Includes the health check endpoint for monitoring and load balancer checks.
"""

from django.db import connection
from django.http import JsonResponse

from calculator.providers import load_providers
from calculator.services.estimation_store import get_product_store
from calculator.exceptions import StoreUnavailable


def health_check(request):
    """
    Health check endpoint for the calculator service.

    Endpoint: GET /api/health/
    No authentication required (for load balancer checks).

    Response fields:
        - status: "healthy" or "unhealthy"
        - database: "connected" or "error"
        - store_backend: configured estimation store backend, or "unavailable"
        - providers: provider name -> configured (bool)

    Returns:
        HTTP 200 for healthy, HTTP 503 for unhealthy
    """
    status = "healthy"
    http_status = 200

    database_status = "connected"
    try:
        connection.ensure_connection()
    except Exception:
        database_status = "error"
        status = "unhealthy"
        http_status = 503

    try:
        store_backend = get_product_store().backend_name
    except StoreUnavailable:
        store_backend = "unavailable"

    providers = {provider.name: provider.is_available() for provider in load_providers()}

    return JsonResponse(
        {
            "status": status,
            "database": database_status,
            "store_backend": store_backend,
            "providers": providers,
        },
        status=http_status,
    )
