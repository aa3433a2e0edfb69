"""
Tests for deferred activation (ActivationScheduler + AsyncioTimerService).

Covers:
  - countdown_activate validates the project at schedule time
  - a fired timer activates the project
  - cancelling before the timer fires prevents activation
  - cancel is a no-op for unknown, fired and already cancelled handles
  - suspension before firing turns the activation into a no-op
  - the callback re-reads the project and only touches is_active
  - callback failures are logged, not raised
"""

import asyncio
import logging

import pytest

from interest_registry.core.errors import InvalidPayload, ProjectNotFound, ProjectSuspended
from interest_registry.core.locks import LocalProjectLocks
from interest_registry.core.registry import ProjectRegistry
from interest_registry.core.store import ProjectStore

FIRE_DELAY = 0.2


async def _let_timers_fire(timers, delay: float = FIRE_DELAY):
    await asyncio.sleep(delay + 0.1)
    await timers.wait_fired()


async def test_timer_activates_project(scheduler, timers, registry, project_factory):
    project_id = await project_factory(is_active=False)

    handle = await scheduler.countdown_activate(project_id, FIRE_DELAY)
    assert isinstance(handle, str)
    assert (await registry.get_project(project_id)).is_active is False

    await _let_timers_fire(timers)

    project = await registry.get_project(project_id)
    assert project.is_active is True
    assert project.updated_at is not None
    assert timers.pending == 0


async def test_zero_delay_fires(scheduler, timers, registry, project_factory):
    project_id = await project_factory(is_active=False)

    await scheduler.countdown_activate(project_id, 0)
    await _let_timers_fire(timers, 0)

    assert (await registry.get_project(project_id)).is_active is True


async def test_cancel_before_fire(scheduler, timers, registry, project_factory):
    project_id = await project_factory(is_active=False)

    handle = await scheduler.countdown_activate(project_id, FIRE_DELAY)
    scheduler.cancel_activation(handle)
    await _let_timers_fire(timers)

    assert (await registry.get_project(project_id)).is_active is False
    assert timers.pending == 0


async def test_cancel_is_idempotent(scheduler, timers, project_factory):
    project_id = await project_factory(is_active=False)
    handle = await scheduler.countdown_activate(project_id, FIRE_DELAY)

    scheduler.cancel_activation(handle)
    scheduler.cancel_activation(handle)
    scheduler.cancel_activation("never-issued")


async def test_cancel_after_fire_is_noop(scheduler, timers, registry, project_factory):
    project_id = await project_factory(is_active=False)
    handle = await scheduler.countdown_activate(project_id, 0)
    await _let_timers_fire(timers, 0)

    scheduler.cancel_activation(handle)

    assert (await registry.get_project(project_id)).is_active is True


async def test_unknown_project(scheduler, timers):
    with pytest.raises(ProjectNotFound):
        await scheduler.countdown_activate("unknown", 1000)
    assert timers.pending == 0


async def test_suspended_project_cannot_be_scheduled(scheduler, registry, project_factory):
    project_id = await project_factory(is_active=False)
    await registry.suspend_project(project_id)

    with pytest.raises(ProjectSuspended):
        await scheduler.countdown_activate(project_id, FIRE_DELAY)


async def test_negative_delay_rejected(scheduler, project_factory):
    project_id = await project_factory(is_active=False)
    with pytest.raises(InvalidPayload):
        await scheduler.countdown_activate(project_id, -1)


async def test_suspension_before_fire_skips(scheduler, timers, registry, project_factory):
    project_id = await project_factory(is_active=False)
    await scheduler.countdown_activate(project_id, FIRE_DELAY)
    await registry.suspend_project(project_id)
    suspended = await registry.get_project(project_id)

    await _let_timers_fire(timers)

    project = await registry.get_project(project_id)
    assert project.is_active is False
    assert project == suspended


async def test_fire_keeps_concurrent_updates(scheduler, timers, registry, project_factory):
    project_id = await project_factory(title="Old", is_active=False)
    await scheduler.countdown_activate(project_id, FIRE_DELAY)

    await registry.update_project(project_id, "New", "desc", "logo", False)
    await _let_timers_fire(timers)

    project = await registry.get_project(project_id)
    assert project.is_active is True
    assert project.title == "New"
    assert project.description == "desc"


async def test_fire_keeps_interest_registered_meanwhile(
    scheduler, timers, registry, project_factory
):
    project_id = await project_factory(is_active=True)
    await scheduler.countdown_activate(project_id, FIRE_DELAY)
    await registry.register_interest(project_id, "x@y.com")

    await _let_timers_fire(timers)

    project = await registry.get_project(project_id)
    assert project.interest_count == 1
    assert project.interest_emails == ("x@y.com",)


async def test_apply_activation_on_missing_project(scheduler):
    assert await scheduler.apply_activation("missing") is False


async def test_apply_activation_swallows_errors(scheduler, monkeypatch, caplog):
    async def _boom(project_id, **kwargs):
        raise RuntimeError("store down")

    monkeypatch.setattr(scheduler.registry, "activate_pending", _boom)

    with caplog.at_level(logging.ERROR):
        assert await scheduler.apply_activation("p1") is False
    assert "store down" in caplog.text


async def test_cancel_while_callback_waits_for_lock(
    scheduler, timers, registry, project_factory
):
    project_id = await project_factory(is_active=False)

    async with registry.locks.hold(project_id):
        handle = await scheduler.countdown_activate(project_id, 0)
        await asyncio.sleep(0.05)
        assert timers.pending == 0  # fired, callback is queued on the lock
        scheduler.cancel_activation(handle)

    await timers.wait_fired()

    assert (await registry.get_project(project_id)).is_active is False
    assert timers.is_cancelled(handle) is False


async def test_cancel_after_callback_holds_lock_loses(
    scheduler, timers, registry, project_factory
):
    project_id = await project_factory(is_active=False)
    handle = await scheduler.countdown_activate(project_id, 0)
    await asyncio.sleep(0.05)
    await timers.wait_fired()

    scheduler.cancel_activation(handle)

    assert (await registry.get_project(project_id)).is_active is True


class _SlowReadStore(ProjectStore):
    """Returns what it read, but only after a pause."""

    async def get(self, project_id):
        project = await super().get(project_id)
        await asyncio.sleep(0.2)
        return project


async def test_activation_does_not_overwrite_interest_from_other_process(
    session_factory, registry, project_factory
):
    # A worker with its own locks: the per-project lock does not exclude it
    worker = ProjectRegistry(_SlowReadStore(session_factory), LocalProjectLocks())
    project_id = await project_factory(is_active=True)

    applied, _ = await asyncio.gather(
        worker.activate_pending(project_id),
        registry.register_interest(project_id, "x@y.io"),
    )

    project = await registry.get_project(project_id)
    assert applied is True
    assert project.is_active is True
    assert project.interest_count == 1
    assert project.interest_emails == ("x@y.io",)


async def test_activation_skips_project_suspended_after_read(
    session_factory, registry, project_factory
):
    worker = ProjectRegistry(_SlowReadStore(session_factory), LocalProjectLocks())
    project_id = await project_factory(is_active=False)

    applied, _ = await asyncio.gather(
        worker.activate_pending(project_id),
        registry.suspend_project(project_id),
    )

    project = await registry.get_project(project_id)
    assert applied is False
    assert project.is_active is False
    assert project.is_suspended is True
