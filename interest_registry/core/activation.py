"""
Deferred activation of projects.

``countdown_activate`` checks the project now and schedules a timer that
carries only the project id. When the timer fires, ``apply_activation``
re-reads the project under its lock and sets ``is_active``, unless the
project has since disappeared or been suspended.
"""

import logging

from interest_registry.core.errors import InvalidPayload, ProjectNotFound, ProjectSuspended
from interest_registry.core.registry import ProjectRegistry
from interest_registry.core.timers import TimerService

logger = logging.getLogger(__name__)


class ActivationScheduler:
    def __init__(self, registry: ProjectRegistry, timers: TimerService):
        self.registry = registry
        self.timers = timers
        self.timers.bind(self.apply_activation)

    async def countdown_activate(self, project_id: str, delay: float) -> str:
        """Schedule activation of ``project_id`` after ``delay`` seconds."""
        if delay < 0:
            raise InvalidPayload([f"delay: must be >= 0, got {delay}"], project_id)

        project = await self.registry.get_project(project_id)
        if project is None:
            raise ProjectNotFound(project_id)
        if project.is_suspended:
            raise ProjectSuspended(project_id)

        handle = self.timers.schedule(delay, project_id)
        logger.info(f"Scheduled activation of project {project_id} in {delay}s ({handle})")
        return handle

    def cancel_activation(self, handle: str) -> None:
        """Cancel a pending activation. Unknown or resolved handles are ignored."""
        self.timers.cancel(handle)
        logger.info(f"Project timer {handle} cancelled")

    async def apply_activation(self, project_id: str, handle: str | None = None) -> bool:
        """Timer callback. Never raises: nobody is waiting on the result."""
        try:
            return await self.registry.activate_pending(
                project_id,
                is_cancelled=lambda: handle is not None
                and self.timers.is_cancelled(handle),
            )
        except Exception as e:
            logger.error(f"Activation of project {project_id} failed: {e}", exc_info=True)
            return False
