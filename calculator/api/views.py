"""
REST API views for the import calculator.

Endpoints for:
- Resolving product URLs into priced products with shipping estimates
- Confirming a product price and recalculating landed cost
- Reading learning store insights

Endpoints are anonymous and rate limited per IP.
"""

import logging
import time

from asgiref.sync import async_to_sync
from drf_spectacular.utils import extend_schema
from rest_framework import serializers, status
from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from calculator.api.throttling import ResolveThrottle
from calculator.exceptions import InvalidInput
from calculator.models import Category
from calculator.services.batch import BatchCoordinator, is_http_url
from calculator.services.classification import detect_retailer
from calculator.services.estimation_store import get_product_store_or_null
from calculator.services.orchestrator import ScrapeOrchestrator
from calculator.services.shipping import calculate_landed_price, estimate_shipping_cost
from calculator.utils.normalization import parse_price

logger = logging.getLogger(__name__)


def _get_coordinator() -> BatchCoordinator:
    return BatchCoordinator(ScrapeOrchestrator())


def _get_store():
    return get_product_store_or_null()


@extend_schema(
    tags=['Products'],
    summary='Resolve product URLs',
    description='''
    Resolve up to 20 retailer product URLs into products with category,
    shipping cost to Bermuda and landed pricing. Results keep input order.
    ''',
    request={
        'application/json': {
            'type': 'object',
            'properties': {
                'urls': {'type': 'array', 'items': {'type': 'string', 'format': 'uri'}, 'maxItems': 20},
            },
            'required': ['urls'],
        }
    },
    responses={
        200: {'description': 'Resolved products'},
        400: {'description': 'Missing, malformed or oversized URL list'},
    },
)
@api_view(['POST'])
@permission_classes([AllowAny])
@throttle_classes([ResolveThrottle])
def resolve_products(request):
    """
    Resolve a batch of product URLs.

    Request body:
    {
        "urls": ["https://www.amazon.com/...", "https://www.wayfair.com/..."]
    }
    """
    if not isinstance(request.data, dict):
        return Response({'error': 'Request body must be a JSON object'}, status=status.HTTP_400_BAD_REQUEST)

    start_time = time.time()
    urls = request.data.get('urls')

    try:
        products = async_to_sync(_get_coordinator().resolve_products)(urls)
    except InvalidInput as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    elapsed_ms = int((time.time() - start_time) * 1000)
    logger.info("Resolved %d products in %dms", len(products), elapsed_ms)

    return Response({
        'products': [product.to_dict() for product in products],
        'resolution_time_ms': elapsed_ms,
    })


@extend_schema(
    tags=['Products'],
    summary='Confirm product price',
    description='''
    Recalculate shipping and landed pricing for a user-supplied price.
    When "confirmed" is true the price is stored and the product is treated
    as fully known on later lookups.
    ''',
    request={
        'application/json': {
            'type': 'object',
            'properties': {
                'url': {'type': 'string', 'format': 'uri'},
                'price': {'type': 'string', 'example': '499.99'},
                'confirmed': {'type': 'boolean', 'default': False},
            },
            'required': ['url', 'price'],
        }
    },
    responses={
        200: {'description': 'Recalculated pricing'},
        400: {'description': 'Invalid URL or price'},
    },
)
@api_view(['POST'])
@permission_classes([AllowAny])
@throttle_classes([ResolveThrottle])
def confirm_price(request):
    """
    Confirm a product price.

    Request body:
    {
        "url": "https://www.wayfair.com/...",
        "price": "499.99",
        "confirmed": true
    }
    """
    if not isinstance(request.data, dict):
        return Response({'error': 'Request body must be a JSON object'}, status=status.HTTP_400_BAD_REQUEST)

    url = request.data.get('url')
    if not is_http_url(url):
        return Response({'error': 'A valid http(s) url is required'}, status=status.HTTP_400_BAD_REQUEST)

    price = parse_price(request.data.get('price'))
    if price is None:
        return Response({'error': 'price must be a positive number'}, status=status.HTTP_400_BAD_REQUEST)

    try:
        confirmed = serializers.BooleanField().to_internal_value(request.data.get('confirmed', False))
    except serializers.ValidationError:
        return Response({'error': 'confirmed must be a boolean'}, status=status.HTTP_400_BAD_REQUEST)
    store = _get_store()

    if confirmed:
        product = async_to_sync(store.confirm_price)(url, price)
    else:
        product = async_to_sync(store.get_known_product)(url)

    category = product.category if product else Category.GENERAL.value
    weight = product.weight if product else None
    dimensions = product.dimensions if product else None

    shipping_cost = estimate_shipping_cost(category, weight, price, dimensions)
    landed = calculate_landed_price(price, shipping_cost)

    return Response({
        'url': url,
        'retailer': detect_retailer(url),
        'category': category,
        'price': str(price),
        'shipping_cost': str(shipping_cost),
        'landed_pricing': {key: str(value) for key, value in landed.items()},
        'confirmed': confirmed and product is not None,
    })


@extend_schema(
    tags=['Insights'],
    summary='Learning store insights',
    responses={200: {'description': 'Totals, success rates, top retailers and provider performance'}},
)
@api_view(['GET'])
@permission_classes([AllowAny])
def insights(request):
    """Return statistics from the estimation store."""
    return Response(async_to_sync(_get_store().get_insights)())
