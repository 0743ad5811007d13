"""
Celery tasks for the import calculator.

- resolve_products_task: resolve a batch of product URLs off the request path
"""

import logging
from typing import Any, Dict, List

from asgiref.sync import async_to_sync
from celery import shared_task

from calculator.exceptions import InvalidInput
from calculator.services.batch import BatchCoordinator

logger = logging.getLogger(__name__)


@shared_task(name="calculator.tasks.resolve_products_task")
def resolve_products_task(urls: List[str]) -> Dict[str, Any]:
    """
    Resolve a batch of product URLs.

    Routed to the "scrape" queue. Products are returned serialized so the
    result backend can store them.

    Returns:
        {"products": [...]} on success, {"error": "..."} for a malformed batch
    """
    logger.info("Batch resolution task started for %d URLs", len(urls) if isinstance(urls, list) else 0)

    try:
        products = async_to_sync(BatchCoordinator().resolve_products)(urls)
    except InvalidInput as e:
        logger.warning("Rejected batch: %s", str(e))
        return {"error": str(e)}

    return {"products": [product.to_dict() for product in products]}
