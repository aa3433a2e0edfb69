"""
Deferred activation executed by a Celery worker.

CeleryTimerService schedules this task with a countdown. When it runs, the
project is re-read by id and activated unless it is gone or suspended.
The worker takes the per-project lock from ``build_project_locks`` so it
serializes with API calls running in other processes.
"""

import asyncio
import logging

from celery import shared_task

from interest_registry.core.locks import build_project_locks
from interest_registry.core.registry import ProjectRegistry
from interest_registry.core.store import ProjectStore
from interest_registry.core.timers import ACTIVATION_TASK_NAME
from interest_registry.db.session import dispose_engine, get_session_local
from interest_registry.db.valkey import close_valkey_client

logger = logging.getLogger(__name__)


async def _activate_project(project_id: str) -> dict:
    try:
        registry = ProjectRegistry(
            ProjectStore(get_session_local()), build_project_locks()
        )
        applied = await registry.activate_pending(project_id)
        return {
            "status": "activated" if applied else "skipped",
            "project_id": project_id,
        }
    except Exception as exc:
        logger.error(f"Activation of project {project_id} failed: {exc}", exc_info=True)
        raise
    finally:
        await dispose_engine()
        # The client is bound to this asyncio.run loop
        await close_valkey_client()


@shared_task(name=ACTIVATION_TASK_NAME)
def activate_project(project_id: str) -> dict:
    """
    Celery task that fires a scheduled project activation.

    Args:
        project_id: Project to activate.

    Returns:
        Dict with status ("activated" or "skipped") and the project id.
    """
    return asyncio.run(_activate_project(project_id))
