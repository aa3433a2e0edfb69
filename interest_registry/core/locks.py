"""
Per-project critical sections.

Every read-modify-write of a project runs inside ``locks.hold(project_id)``.
LocalProjectLocks covers a single event loop; ValkeyProjectLocks covers
several processes (API plus Celery workers) sharing one Valkey instance.
"""

import asyncio
import logging
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from typing import Protocol

from valkey.asyncio import Valkey

from interest_registry.config import settings
from interest_registry.core.errors import ProjectBusy

logger = logging.getLogger(__name__)

LOCK_KEY_PREFIX = "registry:lock:project:"


class ProjectLocks(Protocol):
    def hold(self, project_id: str) -> AbstractAsyncContextManager[None]: ...


class LocalProjectLocks:
    """In-process ``asyncio.Lock`` per project id.

    Entries are reference counted and dropped once nobody holds or waits on
    them, so the map only contains ids with in-flight operations.
    """

    def __init__(self):
        self._locks: dict[str, asyncio.Lock] = {}
        self._users: dict[str, int] = {}

    def __len__(self) -> int:
        return len(self._locks)

    @asynccontextmanager
    async def hold(self, project_id: str):
        lock = self._locks.setdefault(project_id, asyncio.Lock())
        self._users[project_id] = self._users.get(project_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[project_id] -= 1
            if self._users[project_id] == 0:
                del self._users[project_id]
                del self._locks[project_id]


class ValkeyProjectLocks:
    """Distributed per-project lock backed by Valkey.

    The lock carries a safety timeout so a crashed holder cannot block a
    project forever. Waiting longer than ``blocking_timeout`` raises
    ProjectBusy.
    """

    def __init__(
        self,
        client: Valkey,
        timeout: int = 30,
        blocking_timeout: int = 10,
    ):
        self._client = client
        self._timeout = timeout
        self._blocking_timeout = blocking_timeout

    @asynccontextmanager
    async def hold(self, project_id: str):
        lock = self._client.lock(
            f"{LOCK_KEY_PREFIX}{project_id}",
            timeout=self._timeout,
            blocking_timeout=self._blocking_timeout,
        )
        acquired = await lock.acquire(blocking=True)
        if not acquired:
            logger.info(f"Could not acquire lock for project: {project_id}")
            raise ProjectBusy(project_id)
        try:
            yield
        finally:
            try:
                await lock.release()
            except Exception as e:
                logger.warning(f"Error releasing lock for project {project_id}: {e}")


def build_project_locks(backend: str | None = None):
    """Build the lock manager selected by ``settings.lock_backend``."""
    backend = backend or settings.lock_backend
    if backend == "valkey":
        from interest_registry.db.valkey import get_valkey_client

        return ValkeyProjectLocks(
            get_valkey_client(),
            timeout=settings.lock_timeout_seconds,
            blocking_timeout=settings.lock_blocking_timeout_seconds,
        )
    return LocalProjectLocks()
