from fastapi import Request

from interest_registry.core.activation import ActivationScheduler
from interest_registry.core.registry import ProjectRegistry


# The registry and scheduler are built once at startup and live on app.state


def get_registry(request: Request) -> ProjectRegistry:
    return request.app.state.registry


def get_scheduler(request: Request) -> ActivationScheduler:
    return request.app.state.scheduler
