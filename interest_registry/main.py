"""
interest_registry entry point.

On startup builds the project store, per-project locks, registry, timer
service and activation scheduler, and keeps them on ``app.state``.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from interest_registry.config import settings
from interest_registry.api.v1.router import api_router
from interest_registry.core.activation import ActivationScheduler
from interest_registry.core.locks import build_project_locks
from interest_registry.core.registry import ProjectRegistry
from interest_registry.core.store import ProjectStore
from interest_registry.core.timers import build_timer_service
from interest_registry.db.session import create_tables, get_session_local
from logging import getLogger, Filter
import logging

logger = getLogger(__name__)
logger.setLevel(logging.INFO)


class HealthCheckFilter(Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        return record.getMessage().find("/health") == -1


logging.getLogger("uvicorn.access").addFilter(HealthCheckFilter())


app = FastAPI(title=settings.app_name, debug=settings.debug, redirect_slashes=False)


@app.on_event("startup")
async def startup_event():
    logger.info("--- Starting interest_registry startup ---")

    if settings.auto_create_tables:
        await create_tables()

    registry = ProjectRegistry(
        ProjectStore(get_session_local()), build_project_locks()
    )
    app.state.registry = registry
    app.state.scheduler = ActivationScheduler(registry, build_timer_service())

    logger.info(
        f"--- interest_registry startup completed "
        f"(timers={settings.timer_backend}, locks={settings.lock_backend}) ---"
    )


@app.on_event("shutdown")
async def shutdown_event():
    try:
        logger.info("--- Server shutting down! ---")

        if hasattr(app.state, "scheduler"):
            await app.state.scheduler.timers.shutdown()

        from interest_registry.db.session import dispose_engine
        from interest_registry.db.valkey import close_valkey_client

        await dispose_engine()
        logger.info("--- Database connections closed. ---")

        await close_valkey_client()
    except Exception as e:
        logger.error(f"Warning: Error during shutdown: {e}")


app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix="/api/v1")


@app.get("/")
def read_root():
    return {"message": "Welcome to Interest Registry"}


@app.get("/health")
def health_check():
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
