from interest_registry.celery_app import celery_app
from interest_registry.tasks import activation

__all__ = [
    "celery_app",
    "activation",
]
