"""Tests for the team aggregator."""

from __future__ import annotations

import asyncio

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from wildpack.core.errors import TeamNotFound
from wildpack.models.profiles import Team
from wildpack.modules.teams import service

pytestmark = pytest.mark.anyio


class TestTeamShare:
    @pytest.mark.parametrize(("xp", "share"), [(0, 0), (1, 0), (15, 7), (20, 10), (21, 10)])
    def test_half_rounded_down(self, xp: int, share: int):
        assert service.team_share(xp) == share


class TestIncrementTeamXp:
    async def test_returns_new_total(self, db: AsyncSession, sample_team: Team):
        assert await service.increment_team_xp(db, sample_team.id, 10) == 10
        assert await service.increment_team_xp(db, sample_team.id, 0) == 10
        await db.commit()

        team = await service.get_team_or_raise(db, sample_team.id)
        assert team.team_xp == 10

    async def test_negative_delta_rejected(self, db: AsyncSession, sample_team: Team):
        with pytest.raises(ValueError):
            await service.increment_team_xp(db, sample_team.id, -1)

    async def test_unknown_team(self, db: AsyncSession):
        with pytest.raises(TeamNotFound):
            await service.increment_team_xp(db, 4242, 5)

    async def test_concurrent_increments_are_not_lost(
        self,
        db: AsyncSession,
        session_factory: async_sessionmaker[AsyncSession],
        sample_team: Team,
    ):
        deltas = [3, 7, 10, 1, 9, 4]

        async def bump(delta: int) -> None:
            async with session_factory() as session:
                await service.increment_team_xp(session, sample_team.id, delta)
                await session.commit()

        await asyncio.gather(*(bump(d) for d in deltas))

        team = await service.get_team_or_raise(db, sample_team.id)
        assert team.team_xp == sum(deltas)


class TestReads:
    async def test_get_unknown_team(self, db: AsyncSession):
        with pytest.raises(TeamNotFound):
            await service.get_team_or_raise(db, 4242)

    async def test_leaderboard_order(self, db: AsyncSession, sample_team: Team, other_team: Team):
        await service.increment_team_xp(db, other_team.id, 50)
        await service.increment_team_xp(db, sample_team.id, 20)
        await db.commit()

        teams = await service.list_teams_by_xp(db)

        assert [t.name for t in teams] == ["Foxes", "Otters"]
