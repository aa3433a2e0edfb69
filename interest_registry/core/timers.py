"""
One-shot activation timers.

A timer service schedules "activate this project id after ``delay``
seconds" and hands back an opaque string handle that can cancel it. Two
backends:

- AsyncioTimerService keeps timers on the running event loop. They are lost
  when the process exits.
- CeleryTimerService sends the ``activation.activate_project`` task with a
  countdown, so the broker holds the timer and any worker fires it.
"""

import asyncio
import logging
import uuid
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable

from celery import Celery

logger = logging.getLogger(__name__)

ACTIVATION_TASK_NAME = "activation.activate_project"

# Called with (project_id, handle)
FireCallback = Callable[[str, str], Awaitable[object]]


class TimerService(ABC):
    def bind(self, fire: FireCallback) -> None:
        """Register the coroutine run when a timer fires.

        Backends that fire somewhere else (a Celery worker) ignore it.
        """

    @abstractmethod
    def schedule(self, delay: float, project_id: str) -> str: ...

    @abstractmethod
    def cancel(self, handle: str) -> None: ...

    def is_cancelled(self, handle: str) -> bool:
        """True when ``handle`` was cancelled after its timer had already fired.

        The fire callback checks this once it holds the project lock, so a
        cancel that lands while the callback waits for the lock still wins.
        """
        return False

    async def shutdown(self) -> None:
        """Release backend resources. Pending in-process timers are dropped."""


class AsyncioTimerService(TimerService):
    def __init__(self, fire: FireCallback | None = None):
        self._fire = fire
        self._pending: dict[str, asyncio.TimerHandle] = {}
        self._running: set[asyncio.Task] = set()
        # Fired handles whose callback has not finished, and the subset
        # cancelled in that window
        self._firing: set[str] = set()
        self._cancelled: set[str] = set()

    @property
    def pending(self) -> int:
        return len(self._pending)

    def bind(self, fire: FireCallback) -> None:
        self._fire = fire

    def schedule(self, delay: float, project_id: str) -> str:
        if self._fire is None:
            raise RuntimeError("AsyncioTimerService has no fire callback bound")

        handle = uuid.uuid4().hex
        loop = asyncio.get_running_loop()
        self._pending[handle] = loop.call_later(
            max(delay, 0), self._on_timer, handle, project_id
        )
        return handle

    def _on_timer(self, handle: str, project_id: str) -> None:
        self._pending.pop(handle, None)
        self._firing.add(handle)
        task = asyncio.ensure_future(self._fire(project_id, handle))
        self._running.add(task)
        task.add_done_callback(lambda t: self._on_fired(handle, t))

    def _on_fired(self, handle: str, task: asyncio.Task) -> None:
        self._running.discard(task)
        self._firing.discard(handle)
        self._cancelled.discard(handle)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Activation timer callback failed", exc_info=exc)

    def cancel(self, handle: str) -> None:
        timer = self._pending.pop(handle, None)
        if timer is not None:
            timer.cancel()
        elif handle in self._firing:
            self._cancelled.add(handle)

    def is_cancelled(self, handle: str) -> bool:
        return handle in self._cancelled

    async def wait_fired(self) -> None:
        """Wait until every callback that has already fired has finished."""
        if self._running:
            await asyncio.gather(*self._running, return_exceptions=True)

    async def shutdown(self) -> None:
        for timer in self._pending.values():
            timer.cancel()
        if self._pending:
            logger.info(f"Dropped {len(self._pending)} pending activation timers")
        self._pending.clear()
        await self.wait_fired()


class CeleryTimerService(TimerService):
    def __init__(self, celery_app: Celery):
        self._celery_app = celery_app

    def schedule(self, delay: float, project_id: str) -> str:
        result = self._celery_app.send_task(
            ACTIVATION_TASK_NAME,
            args=[project_id],
            countdown=max(delay, 0),
        )
        return result.id

    def cancel(self, handle: str) -> None:
        # Revoking an unknown, finished or revoked task id is a no-op
        self._celery_app.control.revoke(handle)


def build_timer_service(backend: str | None = None) -> TimerService:
    """Build the timer service selected by ``settings.timer_backend``."""
    from interest_registry.config import settings

    backend = backend or settings.timer_backend
    if backend == "celery":
        from interest_registry.celery_app import get_celery_app

        return CeleryTimerService(get_celery_app())
    return AsyncioTimerService()
