"""Tests for ProjectStore keyed persistence."""

from datetime import datetime, timezone

from interest_registry.models.pydantic_models.project import ProjectModel


def _project(project_id: str, **overrides) -> ProjectModel:
    data = dict(
        id=project_id,
        title="T",
        description="D",
        logo_url="L",
        is_active=False,
        created_at=datetime.now(timezone.utc),
    )
    data.update(overrides)
    return ProjectModel(**data)


async def test_get_missing_returns_none(store):
    assert await store.get("nope") is None


async def test_insert_then_get(store):
    await store.insert(_project("b"))
    project = await store.get("b")
    assert project.id == "b"
    assert project.interest_emails == ()


async def test_insert_overwrites_existing_key(store):
    await store.insert(_project("a"))
    await store.insert(
        _project("a", title="T2", interest_count=1, interest_emails=("x@y.com",))
    )

    project = await store.get("a")
    assert project.title == "T2"
    assert project.interest_emails == ("x@y.com",)
    assert [p.id async for p in store.values()] == ["a"]


async def test_values_in_key_order(store):
    for project_id in ["c", "a", "b"]:
        await store.insert(_project(project_id))

    assert [p.id async for p in store.values()] == ["a", "b", "c"]


async def test_activate_leaves_other_fields(store):
    await store.insert(
        _project("a", interest_count=1, interest_emails=("x@y.com",))
    )
    now = datetime.now(timezone.utc)

    assert await store.activate("a", now) is True

    project = await store.get("a")
    assert project.is_active is True
    assert project.updated_at == now
    assert project.interest_emails == ("x@y.com",)


async def test_activate_skips_missing_and_suspended(store):
    await store.insert(_project("s", is_suspended=True))
    now = datetime.now(timezone.utc)

    assert await store.activate("missing", now) is False
    assert await store.activate("s", now) is False
    assert (await store.get("s")).is_active is False


async def test_timestamps_read_back_as_utc(store):
    created = datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)
    await store.insert(_project("a", created_at=created))

    project = await store.get("a")
    assert project.created_at == created
    assert project.created_at.tzinfo is not None
