"""
Project configuration package.

Importing the Celery app here ensures shared tasks bind to it when Django starts.
"""

from .celery import app as celery_app

__all__ = ["celery_app"]
