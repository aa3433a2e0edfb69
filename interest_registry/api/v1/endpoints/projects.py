"""
Project registry endpoints.

Thin HTTP wrappers over ProjectRegistry and ActivationScheduler. Registry
failures come back in the standard APIResponse envelope with the failure
kind as the first entry of ``errors``.
"""

import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field, StrictBool

from interest_registry.api.v1.deps import get_registry, get_scheduler
from interest_registry.api.v1.helpers.responses import (
    APIResponse,
    not_found_response,
    registry_error_response,
    success_response,
)
from interest_registry.core.activation import ActivationScheduler
from interest_registry.core.errors import RegistryError
from interest_registry.core.registry import ProjectRegistry
from interest_registry.models.pydantic_models.project import (
    ProjectListResponse,
    ProjectModel,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/projects", tags=["Projects"])
activations_router = APIRouter(prefix="/activations", tags=["Activations"])


# ── request / response schemas ────────────────────────────────────────────


class ProjectRequest(BaseModel):
    title: str
    description: str
    logo_url: str
    is_active: StrictBool


class CreateProjectResponse(BaseModel):
    project_id: str


class RegisterInterestRequest(BaseModel):
    email: str


class CountdownRequest(BaseModel):
    delay_seconds: float = Field(..., ge=0)


class CountdownResponse(BaseModel):
    project_id: str
    timer_handle: str


# ── endpoints ─────────────────────────────────────────────────────────────


@router.post("/", response_model=CreateProjectResponse)
async def create_project(
    request: ProjectRequest,
    registry: ProjectRegistry = Depends(get_registry),
):
    """Create a project. Returns its id."""
    try:
        project_id = await registry.create_project(
            request.title, request.description, request.logo_url, request.is_active
        )
    except RegistryError as e:
        raise registry_error_response(e)
    return CreateProjectResponse(project_id=project_id)


@router.get("/", response_model=ProjectListResponse)
async def list_projects(registry: ProjectRegistry = Depends(get_registry)):
    """List every project in id order."""
    projects = await registry.list_projects()
    return ProjectListResponse(projects=projects, total_count=len(projects))


@router.get("/{project_id}", response_model=ProjectModel)
async def get_project(
    project_id: str,
    registry: ProjectRegistry = Depends(get_registry),
):
    project = await registry.get_project(project_id)
    if project is None:
        raise not_found_response("Project not found")
    return project


@router.put("/{project_id}", response_model=ProjectModel)
async def update_project(
    project_id: str,
    request: ProjectRequest,
    registry: ProjectRegistry = Depends(get_registry),
):
    """Replace a project's title, description, logo and active flag."""
    try:
        return await registry.update_project(
            project_id,
            request.title,
            request.description,
            request.logo_url,
            request.is_active,
        )
    except RegistryError as e:
        raise registry_error_response(e)


@router.post("/{project_id}/suspend", response_model=ProjectModel)
async def suspend_project(
    project_id: str,
    registry: ProjectRegistry = Depends(get_registry),
):
    """Suspend a project permanently."""
    try:
        return await registry.suspend_project(project_id)
    except RegistryError as e:
        raise registry_error_response(e)


@router.post("/{project_id}/interest", response_model=APIResponse)
async def register_interest(
    project_id: str,
    request: RegisterInterestRequest,
    registry: ProjectRegistry = Depends(get_registry),
):
    try:
        message = await registry.register_interest(project_id, request.email)
    except RegistryError as e:
        raise registry_error_response(e)
    return success_response(message=message)


@router.post("/{project_id}/activation", response_model=CountdownResponse)
async def countdown_activate(
    project_id: str,
    request: CountdownRequest,
    scheduler: ActivationScheduler = Depends(get_scheduler),
):
    """Activate the project after ``delay_seconds``. Returns the cancel handle."""
    try:
        handle = await scheduler.countdown_activate(project_id, request.delay_seconds)
    except RegistryError as e:
        raise registry_error_response(e)
    return CountdownResponse(project_id=project_id, timer_handle=handle)


@activations_router.delete("/{timer_handle}", response_model=APIResponse)
async def cancel_activation(
    timer_handle: str,
    scheduler: ActivationScheduler = Depends(get_scheduler),
):
    """Cancel a pending activation. Always succeeds."""
    scheduler.cancel_activation(timer_handle)
    return success_response(message="Activation cancelled")
