"""
API throttling classes.

The calculator is public, so limits are per client IP.
"""

from rest_framework.throttling import AnonRateThrottle


class ResolveThrottle(AnonRateThrottle):
    """
    Throttle for product resolution and price confirmation.

    Rate: 400 requests per hour per IP.
    Applied to: /api/v1/products/resolve/, /api/v1/products/confirm-price/
    """

    rate = '400/hour'
    scope = 'resolve'
