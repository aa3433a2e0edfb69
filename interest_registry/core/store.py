"""
Keyed persistence for projects.

ProjectStore behaves like an ordered key/value map over the ``projects``
table: ``get`` by id, ``insert`` (overwrites an existing key) and ``values``
in primary key order. It exchanges frozen ``ProjectModel`` snapshots, never
live ORM objects, so nothing outside a single call holds a session.
"""

import logging
from datetime import datetime
from collections.abc import AsyncIterator

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from interest_registry.models.projects import Project
from interest_registry.models.pydantic_models.project import ProjectModel

logger = logging.getLogger(__name__)


class ProjectStore:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def get(self, project_id: str) -> ProjectModel | None:
        async with self._session_factory() as session:
            row = await session.get(Project, project_id)
            if row is None:
                return None
            return ProjectModel.model_validate(row)

    async def insert(self, project: ProjectModel) -> None:
        data = project.model_dump()
        data["interest_emails"] = list(project.interest_emails)
        async with self._session_factory() as session:
            await session.merge(Project(**data))
            await session.commit()

    async def activate(self, project_id: str, updated_at: datetime) -> bool:
        """Set ``is_active`` on an open project with a single targeted UPDATE.

        Other columns are left as the database has them. Returns False when no
        open project with that id exists.
        """
        async with self._session_factory() as session:
            result = await session.execute(
                update(Project)
                .where(Project.id == project_id, Project.is_suspended.is_(False))
                .values(is_active=True, updated_at=updated_at)
            )
            await session.commit()
            return (result.rowcount or 0) > 0

    async def values(self) -> AsyncIterator[ProjectModel]:
        """Yield every stored project in key order. Each call re-reads the table."""
        async with self._session_factory() as session:
            result = await session.execute(select(Project).order_by(Project.id))
            for row in result.scalars():
                yield ProjectModel.model_validate(row)
