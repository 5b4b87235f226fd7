"""Shared test fixtures for the Wildpack API test suite."""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from wildpack.core.database import Base, get_db
from wildpack.main import app
from wildpack.models.catalog import Activity, Badge, Pack, PackActivity
from wildpack.models.profiles import Profile, Team


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
async def engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine]:
    """A fresh file-backed SQLite store per test.

    File-backed so that concurrent callers get their own connections; NullPool
    plus a generous busy timeout lets competing writers queue instead of failing.
    """
    test_engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'wildpack.db'}",
        poolclass=NullPool,
        connect_args={"timeout": 30},
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory: async_sessionmaker[AsyncSession]) -> AsyncGenerator[AsyncSession]:
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncClient]:
    async def _override_get_db() -> AsyncGenerator[AsyncSession]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = _override_get_db
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
    app.dependency_overrides.pop(get_db, None)


# ── Sample data fixtures ──────────────────────────────────────────────────


@pytest.fixture
async def sample_team(db: AsyncSession) -> Team:
    team = Team(name="Otters", colour="#2a9d8f", mascot_name="Ollie")
    db.add(team)
    await db.commit()
    return team


@pytest.fixture
async def other_team(db: AsyncSession) -> Team:
    team = Team(name="Foxes", colour="#e76f51", mascot_name="Fern")
    db.add(team)
    await db.commit()
    return team


@pytest.fixture
async def sample_profile(db: AsyncSession, sample_team: Team) -> Profile:
    profile = Profile(
        user_id="user_parent_1", name="Robin Ash", nickname="Robin", team_id=sample_team.id
    )
    db.add(profile)
    await db.commit()
    return profile


@pytest.fixture
async def teammate(db: AsyncSession, sample_team: Team) -> Profile:
    profile = Profile(user_id="user_parent_1", name="Wren Ash", nickname=None, team_id=sample_team.id)
    db.add(profile)
    await db.commit()
    return profile


@pytest.fixture
async def sample_activity(db: AsyncSession) -> Activity:
    """xp=20, no photo needed."""
    activity = Activity(
        title="Pond Dipping", xp=20, photo_required=False, categories=["water", "outdoor"]
    )
    db.add(activity)
    await db.commit()
    return activity


@pytest.fixture
async def photo_activity(db: AsyncSession) -> Activity:
    activity = Activity(title="Spot a Robin", xp=15, photo_required=True, categories=["bird"])
    db.add(activity)
    await db.commit()
    return activity


@pytest.fixture
async def first_steps(db: AsyncSession) -> Badge:
    badge = Badge(
        name="First Steps",
        description="Complete your first activity.",
        icon="🏃",
        category="xp",
        requirement_type="activities_completed_count",
        requirement_value=1,
    )
    db.add(badge)
    await db.commit()
    return badge


@pytest.fixture
async def sample_pack(db: AsyncSession) -> tuple[Pack, list[Activity]]:
    """A pack of two activities worth 10 and 30 XP."""
    pack = Pack(name="Garden Safari", colour="#90be6d")
    activities = [
        Activity(title="Bug Hotel", xp=10, photo_required=False, categories=["outdoor"]),
        Activity(title="Leaf Rubbing", xp=30, photo_required=False, categories=["art"]),
    ]
    db.add(pack)
    db.add_all(activities)
    await db.flush()
    db.add_all([
        PackActivity(pack_id=pack.id, activity_id=a.id, order=i)
        for i, a in enumerate(activities)
    ])
    await db.commit()
    return pack, activities
