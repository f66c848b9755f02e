"""Registration, badge catalog, leaderboard and mission seeding."""

from __future__ import annotations

import json
import uuid
from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from cibersensei.badges.service import get_earned_badges, list_badges
from cibersensei.catalog.badges import BADGE_SEED_DATA, seed_badges
from cibersensei.db.models import UserBadge
from cibersensei.errors import Duplicate, NotFound
from cibersensei.leaderboard.service import top_learners
from cibersensei.missions.service import get_mission, list_missions, seed_missions_from_file
from cibersensei.stats.xp_service import grant_xp
from cibersensei.store.procedures import get_xp
from cibersensei.users.service import get_profile, register_learner


class TestRegisterLearner:
    """Profile and stats rows created once."""

    @pytest.mark.asyncio
    async def test_creates_profile_and_stats(self, db_session):
        user_id = str(uuid.uuid4())
        profile, created = await register_learner(db_session, user_id, "Ana")
        assert created is True
        assert profile.username_normalized == "ana"
        assert await get_xp(db_session, user_id) == 0

    @pytest.mark.asyncio
    async def test_second_call_is_a_no_op(self, db_session):
        user_id = str(uuid.uuid4())
        await register_learner(db_session, user_id, "Ana")
        profile, created = await register_learner(db_session, user_id, "OtraCosa")
        assert created is False
        assert profile.username == "Ana"

    @pytest.mark.asyncio
    async def test_username_taken_case_insensitive(self, db_session, make_learner):
        await make_learner("Ana")
        with pytest.raises(Duplicate):
            await register_learner(db_session, str(uuid.uuid4()), "ANA")

    @pytest.mark.asyncio
    async def test_missing_profile(self, db_session):
        with pytest.raises(NotFound):
            await get_profile(db_session, str(uuid.uuid4()))


class TestXpGrant:
    @pytest.mark.asyncio
    async def test_idempotency_key(self, db_session, make_learner):
        user = await make_learner("ana")
        assert await grant_xp(db_session, user, 10, "mission", "x", "test", "key-1") is True
        assert await grant_xp(db_session, user, 10, "mission", "x", "test", "key-1") is False
        assert await get_xp(db_session, user) == 10


class TestBadges:
    """Seed is idempotent; membership is read-only here."""

    @pytest.mark.asyncio
    async def test_seed_twice(self, db_session):
        await seed_badges(db_session)
        await seed_badges(db_session)
        badges = await list_badges(db_session)
        assert [b.id for b in badges] == [b["id"] for b in BADGE_SEED_DATA]

    @pytest.mark.asyncio
    async def test_earned_badges(self, db_session, make_learner):
        user = await make_learner("ana")
        await seed_badges(db_session)
        db_session.add(UserBadge(user_id=user, badge_id="primer_paso", earned_at=datetime.now(timezone.utc)))
        await db_session.commit()

        earned = await get_earned_badges(db_session, user)
        assert [ub.badge.name for ub in earned] == ["Primer Paso"]


class TestLeaderboard:
    """Ordered by XP, ties by username; works without Redis."""

    @pytest.mark.asyncio
    async def test_top_learners(self, db_session, make_learner):
        ana = await make_learner("ana")
        beto = await make_learner("beto")
        carla = await make_learner("carla")
        await grant_xp(db_session, ana, 10, "mission", None, "t", "a")
        await grant_xp(db_session, beto, 30, "mission", None, "t", "b")
        await grant_xp(db_session, carla, 10, "mission", None, "t", "c")
        await db_session.commit()

        entries = await top_learners(db_session, None, limit=2)
        assert [(e["rank"], e["username"], e["xp"]) for e in entries] == [(1, "beto", 30), (2, "ana", 10)]
        assert entries[0]["user_id"] == beto


class TestSeedMissions:
    """JSON authoring file validated as a whole."""

    @pytest.mark.asyncio
    async def test_loads_file(self, db_session, tmp_path, make_payload):
        path = tmp_path / "missions.json"
        path.write_text(json.dumps([
            {"id": "m1", "level": 1, "type": "Basico", "payload": make_payload("Uno")},
            {"id": "m2", "level": 2, "type": "Basico", "payload": make_payload("Dos")},
        ]), encoding="utf-8")

        assert await seed_missions_from_file(db_session, path) == 2
        assert [m.id for m in await list_missions(db_session)] == ["m1", "m2"]

    @pytest.mark.asyncio
    async def test_reseeding_replaces(self, db_session, tmp_path, make_payload):
        path = tmp_path / "missions.json"
        path.write_text(json.dumps([{"id": "m1", "level": 1, "type": "Basico", "payload": make_payload("Uno")}]))
        await seed_missions_from_file(db_session, path)
        path.write_text(json.dumps([{"id": "m1", "level": 1, "type": "Basico", "payload": make_payload("Nuevo")}]))
        await seed_missions_from_file(db_session, path)

        mission = await get_mission(db_session, "m1")
        assert mission.payload["title"] == "Nuevo"

    @pytest.mark.asyncio
    async def test_invalid_entry_writes_nothing(self, db_session, tmp_path, make_payload):
        bad = make_payload("Malo")
        for choice in bad["choices"]:
            choice["isCorrect"] = True
        path = tmp_path / "missions.json"
        path.write_text(json.dumps([
            {"id": "m1", "level": 1, "type": "Basico", "payload": make_payload("Uno")},
            {"id": "m2", "level": 2, "type": "Basico", "payload": bad},
        ]))

        with pytest.raises(ValidationError):
            await seed_missions_from_file(db_session, path)
        assert await list_missions(db_session) == []
