"""Shared fixtures for task tests."""

from unittest.mock import AsyncMock, patch

import pytest_asyncio

from interest_registry.core.locks import LocalProjectLocks


@pytest_asyncio.fixture()
async def patch_task_session(session_factory):
    """Returns a context-manager tuple that points a task module at the test
    database and stubs out engine/Valkey teardown and the lock backend."""

    def _patch(module_path: str):
        return (
            patch(f"{module_path}.get_session_local", return_value=session_factory),
            patch(f"{module_path}.dispose_engine", new_callable=AsyncMock),
            patch(f"{module_path}.close_valkey_client", new_callable=AsyncMock),
            patch(
                f"{module_path}.build_project_locks",
                side_effect=lambda: LocalProjectLocks(),
            ),
        )

    return _patch
