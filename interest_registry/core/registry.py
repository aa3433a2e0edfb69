"""
Project lifecycle and interest registration.

Lifecycle: created → active/inactive (toggled by update or a fired
activation) → suspended. Suspension is terminal: after it only reads
succeed.

Every mutating operation holds the project's lock for the whole
read → validate → write sequence, so concurrent calls against one project
apply one after the other and no update is lost.
"""

import logging
import re
import uuid
from collections.abc import AsyncIterator, Callable
from datetime import datetime, timezone

from pydantic import ValidationError

from interest_registry.core.errors import (
    AlreadySuspended,
    InactiveProject,
    InvalidEmail,
    InvalidPayload,
    ProjectNotFound,
    ProjectSuspended,
)
from interest_registry.core.locks import LocalProjectLocks, ProjectLocks
from interest_registry.core.store import ProjectStore
from interest_registry.models.pydantic_models.project import (
    ProjectModel,
    ProjectPayload,
)

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

INTEREST_REGISTERED_MESSAGE = "Interest registered successfully"


def _now() -> datetime:
    return datetime.now(timezone.utc)


def is_valid_email(email: str) -> bool:
    return isinstance(email, str) and EMAIL_PATTERN.fullmatch(email) is not None


def _validate_payload(
    title, description, logo_url, is_active, project_id: str | None = None
) -> ProjectPayload:
    try:
        return ProjectPayload(
            title=title,
            description=description,
            logo_url=logo_url,
            is_active=is_active,
        )
    except ValidationError as e:
        errors = [
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
            for err in e.errors()
        ]
        raise InvalidPayload(errors, project_id) from e


class ProjectRegistry:
    def __init__(self, store: ProjectStore, locks: ProjectLocks | None = None):
        self.store = store
        self.locks = locks if locks is not None else LocalProjectLocks()

    async def _get_or_raise(self, project_id: str) -> ProjectModel:
        project = await self.store.get(project_id)
        if project is None:
            raise ProjectNotFound(project_id)
        return project

    # ── lifecycle ─────────────────────────────────────────────────────────

    async def create_project(
        self, title: str, description: str, logo_url: str, is_active: bool
    ) -> str:
        """Create a project and return its id."""
        payload = _validate_payload(title, description, logo_url, is_active)

        project = ProjectModel(
            id=str(uuid.uuid4()),
            **payload.model_dump(),
            is_suspended=False,
            interest_count=0,
            interest_emails=(),
            created_at=_now(),
        )
        await self.store.insert(project)

        logger.info(f"Created project {project.id} (active={project.is_active})")
        return project.id

    async def update_project(
        self,
        project_id: str,
        title: str,
        description: str,
        logo_url: str,
        is_active: bool,
    ) -> ProjectModel:
        """Overwrite the mutable fields of a project that is not suspended."""
        payload = _validate_payload(title, description, logo_url, is_active, project_id)

        async with self.locks.hold(project_id):
            project = await self._get_or_raise(project_id)
            if project.is_suspended:
                raise ProjectSuspended(project_id)

            updated = project.model_copy(
                update={**payload.model_dump(), "updated_at": _now()}
            )
            await self.store.insert(updated)

        logger.info(f"Updated project {project_id} (active={updated.is_active})")
        return updated

    async def suspend_project(self, project_id: str) -> ProjectModel:
        """Suspend a project. A second suspension is rejected, not ignored."""
        async with self.locks.hold(project_id):
            project = await self._get_or_raise(project_id)
            if project.is_suspended:
                raise AlreadySuspended(project_id)

            suspended = project.model_copy(
                update={"is_suspended": True, "updated_at": _now()}
            )
            await self.store.insert(suspended)

        logger.info(f"Suspended project {project_id}")
        return suspended

    async def activate_pending(
        self,
        project_id: str,
        is_cancelled: Callable[[], bool] | None = None,
    ) -> bool:
        """Set ``is_active`` on an open project. Used by fired activation timers.

        Returns False, without raising, when the project is gone or suspended,
        or when ``is_cancelled`` reports True once the lock is held. Only
        ``is_active`` and ``updated_at`` are written; other fields keep
        whatever value is current in the database.
        """
        async with self.locks.hold(project_id):
            if is_cancelled is not None and is_cancelled():
                logger.info(f"Skipping activation: timer for project {project_id} was cancelled")
                return False
            project = await self.store.get(project_id)
            if project is None:
                logger.info(f"Skipping activation: project {project_id} no longer exists")
                return False
            if project.is_suspended:
                logger.info(f"Skipping activation: project {project_id} is suspended")
                return False

            if not await self.store.activate(project_id, _now()):
                logger.info(f"Skipping activation: project {project_id} changed before update")
                return False

        logger.info(f"Project {project_id} is activated")
        return True

    # ── interest ledger ───────────────────────────────────────────────────

    async def register_interest(self, project_id: str, email: str) -> str:
        """Append an email to the project's interest list.

        Repeated emails are accepted and counted each time.
        """
        if not is_valid_email(email):
            raise InvalidEmail(email, project_id)

        async with self.locks.hold(project_id):
            project = await self._get_or_raise(project_id)
            if project.is_suspended:
                raise ProjectSuspended(project_id)
            if not project.is_active:
                raise InactiveProject(project_id)

            updated = project.model_copy(
                update={
                    "interest_emails": (*project.interest_emails, email),
                    "interest_count": project.interest_count + 1,
                    "updated_at": _now(),
                }
            )
            await self.store.insert(updated)

        logger.info(
            f"Registered interest in project {project_id} "
            f"(count={updated.interest_count})"
        )
        return INTEREST_REGISTERED_MESSAGE

    # ── queries ───────────────────────────────────────────────────────────

    async def get_project(self, project_id: str) -> ProjectModel | None:
        return await self.store.get(project_id)

    async def iter_projects(self) -> AsyncIterator[ProjectModel]:
        async for project in self.store.values():
            yield project

    async def list_projects(self) -> list[ProjectModel]:
        return [project async for project in self.iter_projects()]
