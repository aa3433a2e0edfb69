"""
API router assembly.

Registry endpoints are unauthenticated; access control is left to the
deployment in front of the service.
"""

from fastapi import APIRouter

from interest_registry.api.v1.endpoints import projects

api_router = APIRouter()
api_router.include_router(projects.router)
api_router.include_router(projects.activations_router)
