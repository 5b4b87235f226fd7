"""HTTP-level tests for the /v1 routers and the health check."""

from __future__ import annotations

import pytest
from httpx import AsyncClient
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from wildpack.models.catalog import Activity, Badge, Pack
from wildpack.models.profiles import Profile, Team
from wildpack.modules.completion import service as completion_service

pytestmark = pytest.mark.anyio


def _completion_url(profile_id: int, activity_id: int) -> str:
    return f"/v1/completions/profiles/{profile_id}/activities/{activity_id}"


class TestCompletionRoutes:
    async def test_complete_then_retry(
        self,
        client: AsyncClient,
        sample_profile: Profile,
        sample_activity: Activity,
        first_steps: Badge,
    ):
        resp = await client.post(_completion_url(sample_profile.id, sample_activity.id))
        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["xp_gained"] == 20
        assert body["team_xp_gained"] == 10
        assert [b["name"] for b in body["new_badges"]] == ["First Steps"]

        again = await client.post(_completion_url(sample_profile.id, sample_activity.id), json={})
        assert again.status_code == 200
        assert again.json() == {
            "success": True,
            "xp_gained": 0,
            "team_xp_gained": 0,
            "new_badges": [],
        }

    async def test_photo_required_is_422(
        self, client: AsyncClient, sample_profile: Profile, photo_activity: Activity
    ):
        resp = await client.post(_completion_url(sample_profile.id, photo_activity.id))
        assert resp.status_code == 422
        assert resp.json()["error"] == "http_422"

        ok = await client.post(
            _completion_url(sample_profile.id, photo_activity.id),
            json={"photo_url": "https://cdn.example/robin.jpg"},
        )
        assert ok.status_code == 200
        assert ok.json()["xp_gained"] == 15

    async def test_unknown_profile_is_404(self, client: AsyncClient, sample_activity: Activity):
        resp = await client.post(_completion_url(4242, sample_activity.id))
        assert resp.status_code == 404
        assert resp.json()["message"] == "Profile 4242 not found"

    async def test_reward_failure_is_503_then_retryable(
        self,
        client: AsyncClient,
        monkeypatch: pytest.MonkeyPatch,
        sample_profile: Profile,
        sample_activity: Activity,
    ):
        async def team_store_down(*args, **kwargs):
            raise OperationalError("UPDATE teams", {}, Exception("connection reset"))

        monkeypatch.setattr(completion_service, "increment_team_xp", team_store_down)
        resp = await client.post(_completion_url(sample_profile.id, sample_activity.id))
        assert resp.status_code == 503
        assert resp.json()["error"] == "rewards_pending"

        progress = await client.get(
            f"/v1/progress/profiles/{sample_profile.id}/activities/{sample_activity.id}"
        )
        assert progress.json()["status"] == "completed"
        assert progress.json()["rewards_pending"] is True

        monkeypatch.undo()
        retry = await client.post(_completion_url(sample_profile.id, sample_activity.id))
        assert retry.status_code == 200
        assert retry.json()["xp_gained"] == 20

    async def test_lookup_outage_is_503(
        self,
        client: AsyncClient,
        monkeypatch: pytest.MonkeyPatch,
        sample_profile: Profile,
        sample_activity: Activity,
    ):
        async def profiles_down(*args, **kwargs):
            raise OperationalError("SELECT profiles", {}, Exception("connection reset"))

        monkeypatch.setattr(completion_service, "get_profile_or_raise", profiles_down)
        resp = await client.post(_completion_url(sample_profile.id, sample_activity.id))

        assert resp.status_code == 503
        assert resp.json()["error"] == "store_unavailable"

    async def test_party(
        self,
        client: AsyncClient,
        sample_profile: Profile,
        teammate: Profile,
        sample_activity: Activity,
    ):
        resp = await client.post(
            f"/v1/completions/activities/{sample_activity.id}/party",
            json={"profile_ids": [sample_profile.id, teammate.id], "notes": "Family walk"},
        )
        assert resp.status_code == 200
        body = resp.json()
        assert [e["profile_id"] for e in body] == [sample_profile.id, teammate.id]
        assert all(e["xp_gained"] == 20 for e in body)

    async def test_party_requires_members(self, client: AsyncClient, sample_activity: Activity):
        resp = await client.post(
            f"/v1/completions/activities/{sample_activity.id}/party", json={"profile_ids": []}
        )
        assert resp.status_code == 422


class TestProgressRoutes:
    async def test_not_started_then_started(
        self, client: AsyncClient, sample_profile: Profile, sample_activity: Activity
    ):
        url = f"/v1/progress/profiles/{sample_profile.id}/activities/{sample_activity.id}"

        resp = await client.get(url)
        assert resp.status_code == 200
        assert resp.json()["status"] == "not_started"
        assert resp.json()["id"] is None

        started = await client.post(f"{url}/start")
        assert started.status_code == 200
        assert started.json()["status"] == "started"

        again = await client.post(f"{url}/start")
        assert again.json()["id"] == started.json()["id"]

    async def test_start_unknown_activity(self, client: AsyncClient, sample_profile: Profile):
        resp = await client.post(f"/v1/progress/profiles/{sample_profile.id}/activities/4242/start")
        assert resp.status_code == 404

    async def test_recent_and_pack(
        self,
        client: AsyncClient,
        sample_profile: Profile,
        sample_pack: tuple[Pack, list[Activity]],
    ):
        pack, activities = sample_pack
        await client.post(_completion_url(sample_profile.id, activities[0].id))

        recent = await client.get(f"/v1/progress/profiles/{sample_profile.id}/recent")
        assert [r["title"] for r in recent.json()] == ["Bug Hotel"]

        completion = await client.get(
            f"/v1/progress/profiles/{sample_profile.id}/packs/{pack.id}"
        )
        assert completion.json()["completion_percentage"] == 50


class TestBadgeRoutes:
    async def test_catalog_pending_and_earned(
        self,
        client: AsyncClient,
        db: AsyncSession,
        sample_profile: Profile,
        sample_activity: Activity,
    ):
        from wildpack.modules.badges.service import seed_badges

        await seed_badges(db)

        catalog = await client.get("/v1/badges")
        assert len(catalog.json()) == 9

        pending = await client.get(f"/v1/badges/profiles/{sample_profile.id}/pending")
        assert pending.json() == []

        await client.post(_completion_url(sample_profile.id, sample_activity.id))

        earned = await client.get(f"/v1/badges/profiles/{sample_profile.id}")
        assert [b["name"] for b in earned.json()] == ["First Steps"]

        progress = await client.get(f"/v1/badges/profiles/{sample_profile.id}/progress")
        by_badge = {e["badge_id"]: e["percent"] for e in progress.json()}
        first_steps_id = next(b["id"] for b in catalog.json() if b["name"] == "First Steps")
        assert by_badge[first_steps_id] == 100.0

    async def test_unknown_profile(self, client: AsyncClient):
        assert (await client.get("/v1/badges/profiles/4242/progress")).status_code == 404
        assert (await client.get("/v1/badges/profiles/4242/pending")).status_code == 404


class TestTeamRoutes:
    async def test_leaderboard_and_feed(
        self,
        client: AsyncClient,
        sample_profile: Profile,
        sample_team: Team,
        other_team: Team,
        sample_activity: Activity,
    ):
        await client.post(_completion_url(sample_profile.id, sample_activity.id))

        board = (await client.get("/v1/teams")).json()
        assert [(t["rank"], t["name"], t["team_xp"]) for t in board] == [
            (1, "Otters", 10),
            (2, "Foxes", 0),
        ]

        team = await client.get(f"/v1/teams/{sample_team.id}")
        assert team.json()["team_xp"] == 10

        feed = (await client.get(f"/v1/teams/{sample_team.id}/feed")).json()
        assert [(e["source"], e["profile_name"], e["xp"]) for e in feed] == [
            ("mission", "Robin", 20)
        ]

        totals = (await client.get("/v1/teams/feed/totals")).json()
        assert totals == [{"team_id": sample_team.id, "xp": 20}]

    async def test_unknown_team(self, client: AsyncClient):
        assert (await client.get("/v1/teams/4242")).status_code == 404
        assert (await client.get("/v1/teams/4242/feed")).status_code == 404


class TestFeedRoutes:
    async def test_team_activity_log(
        self,
        client: AsyncClient,
        sample_team: Team,
        sample_profile: Profile,
        sample_activity: Activity,
        photo_activity: Activity,
    ):
        await client.post(_completion_url(sample_profile.id, sample_activity.id))
        await client.post(
            f"/v1/progress/profiles/{sample_profile.id}/activities/{photo_activity.id}/start"
        )

        completed = (await client.get(f"/v1/feed/teams/{sample_team.id}/activity")).json()
        assert [(e["profile_name"], e["activity_title"], e["status"]) for e in completed] == [
            ("Robin", "Pond Dipping", "completed")
        ]

        started = await client.get(
            f"/v1/feed/teams/{sample_team.id}/activity", params={"status": "started"}
        )
        assert [e["activity_title"] for e in started.json()] == ["Spot a Robin"]

        assert (await client.get("/v1/feed/teams/4242/activity")).status_code == 404

    async def test_reactions(
        self,
        client: AsyncClient,
        sample_profile: Profile,
        teammate: Profile,
        sample_activity: Activity,
    ):
        await client.post(_completion_url(sample_profile.id, sample_activity.id))
        progress_id = (
            await client.get(
                f"/v1/progress/profiles/{sample_profile.id}/activities/{sample_activity.id}"
            )
        ).json()["id"]
        url = f"/v1/feed/progress/{progress_id}/reactions"

        added = await client.post(url, json={"profile_id": teammate.id, "reaction_type": "like"})
        assert added.status_code == 200
        assert added.json()[1] == {"reaction_type": "like", "count": 1, "has_reacted": True}

        toggled = await client.post(
            f"{url}/toggle", json={"profile_id": teammate.id, "reaction_type": "like"}
        )
        assert toggled.json()["reacted"] is False
        assert toggled.json()["reactions"][1]["count"] == 0

        await client.post(
            f"{url}/toggle", json={"profile_id": teammate.id, "reaction_type": "high_five"}
        )
        removed = await client.delete(f"{url}/high_five", params={"profile_id": teammate.id})
        assert removed.status_code == 200
        assert all(r["count"] == 0 for r in removed.json())

        listed = await client.get(url, params={"profile_id": sample_profile.id})
        assert [r["reaction_type"] for r in listed.json()] == [
            "high_five", "like", "celebrate", "awesome", "great_job"
        ]

    async def test_reaction_errors(self, client: AsyncClient, sample_profile: Profile):
        assert (await client.get("/v1/feed/progress/4242/reactions")).status_code == 404
        bad = await client.post(
            "/v1/feed/progress/4242/reactions",
            json={"profile_id": sample_profile.id, "reaction_type": "thumbs_down"},
        )
        assert bad.status_code == 422


class TestHealth:
    async def test_healthy_store(
        self,
        client: AsyncClient,
        monkeypatch: pytest.MonkeyPatch,
        session_factory: async_sessionmaker[AsyncSession],
    ):
        monkeypatch.setattr("wildpack.core.database.async_session_factory", session_factory)

        resp = await client.get("/health")

        assert resp.status_code == 200
        assert resp.json()["status"] == "healthy"
