from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from interest_registry.config import settings
import logging

logger = logging.getLogger(__name__)

_engine = None
_AsyncSessionLocal = None


def _engine_options(url: str) -> dict:
    # SQLite uses a single-file pool; pool sizing only applies to server databases
    if url.startswith("sqlite"):
        return {"echo": settings.debug}
    return {
        "pool_size": 5,
        "max_overflow": 10,
        "pool_timeout": 30,
        "pool_pre_ping": True,
        "pool_recycle": 300,
        "echo": settings.debug,
        "pool_use_lifo": True,
        "pool_reset_on_return": "rollback",
    }


def get_engine():
    """Get or create the async SQLAlchemy engine lazily."""
    global _engine
    if _engine is None:
        logger.info("Creating async database engine")
        _engine = create_async_engine(
            settings.database_url, **_engine_options(settings.database_url)
        )
        logger.info("Async database engine created successfully")
    return _engine


def get_session_local():
    """Get or create the AsyncSessionLocal class lazily."""
    global _AsyncSessionLocal
    if _AsyncSessionLocal is None:
        engine = get_engine()
        _AsyncSessionLocal = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autocommit=False,
            autoflush=False,
        )
        logger.info("AsyncSessionLocal created successfully")
    return _AsyncSessionLocal


async def create_tables():
    """Create missing tables. Deployments should run alembic instead."""
    from interest_registry.models import Base as _Base

    engine = get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(_Base.metadata.create_all)


async def dispose_engine():
    """Dispose of the database engine and close all connections."""
    global _engine, _AsyncSessionLocal
    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _AsyncSessionLocal = None


def get_engine_instance():
    """Get the database engine instance."""
    return get_engine()
