"""
Shared test fixtures for interest_registry.

Each test gets its own SQLite file database (aiosqlite) with tables created
from the model metadata, an in-process asyncio timer service, and local
per-project locks. Celery and Valkey are mocked where they appear.
"""

import os

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

os.environ.setdefault("DEBUG", "false")
os.environ.setdefault("AUTO_CREATE_TABLES", "false")

from interest_registry.core.activation import ActivationScheduler  # noqa: E402
from interest_registry.core.locks import LocalProjectLocks  # noqa: E402
from interest_registry.core.registry import ProjectRegistry  # noqa: E402
from interest_registry.core.store import ProjectStore  # noqa: E402
from interest_registry.core.timers import AsyncioTimerService  # noqa: E402
from interest_registry.main import app  # noqa: E402
from interest_registry.models import Base  # noqa: E402


# ---------------------------------------------------------------------------
# Database fixtures
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture(scope="function")
async def test_engine(tmp_path):
    """Fresh SQLite database file with all tables created."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'registry.db'}", echo=False
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def session_factory(test_engine):
    return async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


# ---------------------------------------------------------------------------
# Registry fixtures
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture(scope="function")
async def store(session_factory):
    return ProjectStore(session_factory)


@pytest_asyncio.fixture(scope="function")
async def locks():
    return LocalProjectLocks()


@pytest_asyncio.fixture(scope="function")
async def registry(store, locks):
    return ProjectRegistry(store, locks)


@pytest_asyncio.fixture(scope="function")
async def timers():
    service = AsyncioTimerService()
    yield service
    await service.shutdown()


@pytest_asyncio.fixture(scope="function")
async def scheduler(registry, timers):
    return ActivationScheduler(registry, timers)


@pytest_asyncio.fixture(scope="function")
async def project_factory(registry):
    async def _create(
        title: str = "Launch",
        description: str = "Product launch",
        logo_url: str = "https://example.com/logo.png",
        is_active: bool = True,
    ) -> str:
        return await registry.create_project(title, description, logo_url, is_active)

    return _create


# ---------------------------------------------------------------------------
# Test client
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture(scope="function")
async def test_client(registry, scheduler):
    app.state.registry = registry
    app.state.scheduler = scheduler

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as client:
        yield client

    del app.state.registry
    del app.state.scheduler
