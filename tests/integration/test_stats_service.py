"""Stats aggregation and its store procedures."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import text, update

from cibersensei.attempts.ledger import start_attempt
from cibersensei.attempts.service import submit_answer
from cibersensei.db.models import Attempt, UserStats
from cibersensei.stats.service import get_user_stats, summarize_attempts
from cibersensei.store.procedures import get_daily_streak, get_total_playtime_minutes, get_xp


async def _answer(db, user: str, mission_id: str, choice: str) -> None:
    attempt = await start_attempt(db, user, mission_id)
    await submit_answer(db, user, attempt.id, choice)
    await db.commit()


class TestGetUserStats:
    """Counts derived from attempts, metrics from store procedures."""

    @pytest.mark.asyncio
    async def test_new_learner_is_all_zero(self, db_session, make_learner):
        user = await make_learner("ana")
        stats = await get_user_stats(db_session, user)
        assert stats == {
            "correct_count": 0,
            "incorrect_count": 0,
            "missions_completed": 0,
            "xp": 0,
            "streak": 0,
            "time_invested": 0,
        }

    @pytest.mark.asyncio
    async def test_counts(self, db_session, make_learner, make_mission):
        user = await make_learner("ana")
        await make_mission("m1", 1, points=10)
        await make_mission("m1b", 1, points=5)

        await _answer(db_session, user, "m1", "b")
        await _answer(db_session, user, "m1", "a")
        await _answer(db_session, user, "m1", "a")
        await _answer(db_session, user, "m1b", "a")
        await start_attempt(db_session, user, "m1b")  # abandoned
        await db_session.commit()

        stats = await get_user_stats(db_session, user)
        assert stats["correct_count"] == 3
        assert stats["incorrect_count"] == 1
        assert stats["missions_completed"] == 2
        assert stats["xp"] == 25
        assert stats["streak"] == 1
        assert stats["missions_completed"] <= stats["correct_count"]

    @pytest.mark.asyncio
    async def test_wrong_then_right_on_one_mission(self, db_session, make_learner, make_mission):
        user = await make_learner("ana")
        await make_mission("m1", 1, points=10)

        await _answer(db_session, user, "m1", "b")
        await _answer(db_session, user, "m1", "a")

        stats = await get_user_stats(db_session, user)
        assert stats["xp"] == 10
        assert stats["correct_count"] == 1
        assert stats["incorrect_count"] == 1
        assert stats["missions_completed"] == 1

    @pytest.mark.asyncio
    async def test_failing_metric_defaults_to_zero(self, db_session, make_learner, make_mission, monkeypatch):
        user = await make_learner("ana")
        await make_mission("m1", 1, points=10)
        await _answer(db_session, user, "m1", "a")

        async def _boom(*_args, **_kwargs):
            raise RuntimeError("procedure missing")

        monkeypatch.setattr("cibersensei.stats.service.get_daily_streak", _boom)
        stats = await get_user_stats(db_session, user)
        assert stats["streak"] == 0
        assert stats["xp"] == 10
        assert stats["correct_count"] == 1

    @pytest.mark.asyncio
    async def test_failed_metric_is_rolled_back_alone(self, db_session, make_learner, make_mission, monkeypatch):
        user = await make_learner("ana")
        await make_mission("m1", 1, points=10)
        await _answer(db_session, user, "m1", "a")

        async def _broken_xp(db, user_id):
            await db.execute(update(UserStats).where(UserStats.user_id == user_id).values(xp=999))
            await db.execute(text("SELECT xp FROM no_such_table"))

        monkeypatch.setattr("cibersensei.stats.service.get_xp", _broken_xp)
        stats = await get_user_stats(db_session, user)
        assert stats["xp"] == 0
        assert stats["streak"] == 1
        assert stats["correct_count"] == 1

        # the partial write inside the failed metric does not survive
        assert await get_xp(db_session, user) == 10


class TestSummarizeAttempts:
    def test_abandoned_attempts_count_nowhere(self):
        now = datetime.now(timezone.utc)
        attempts = [
            Attempt(mission_id="m1", started_at=now, finished_at=None),
            Attempt(mission_id="m1", started_at=now, finished_at=now, correct=False, score=0),
        ]
        assert summarize_attempts(attempts) == {
            "correct_count": 0,
            "incorrect_count": 1,
            "missions_completed": 0,
        }


class TestStoreProcedures:
    """Streak and playtime over explicit timestamps."""

    @staticmethod
    async def _add(db, user: str, started: datetime, minutes: float) -> None:
        db.add(Attempt(
            user_id=user,
            mission_id="m1",
            started_at=started,
            finished_at=started + timedelta(minutes=minutes),
            correct=False,
            score=0,
        ))
        await db.flush()

    @pytest.mark.asyncio
    async def test_streak_over_consecutive_days(self, db_session, make_learner, make_mission):
        user = await make_learner("ana")
        await make_mission("m1", 1)
        now = datetime(2026, 5, 20, 12, 0, tzinfo=timezone.utc)
        for days_ago in (0, 1, 2, 4):
            await self._add(db_session, user, now - timedelta(days=days_ago), 1)

        assert await get_daily_streak(db_session, user, now=now) == 3

    @pytest.mark.asyncio
    async def test_open_attempts_do_not_count(self, db_session, make_learner, make_mission):
        user = await make_learner("ana")
        await make_mission("m1", 1)
        await start_attempt(db_session, user, "m1")

        assert await get_daily_streak(db_session, user) == 0
        assert await get_total_playtime_minutes(db_session, user) == 0

    @pytest.mark.asyncio
    async def test_playtime_is_floored_minutes(self, db_session, make_learner, make_mission):
        user = await make_learner("ana")
        await make_mission("m1", 1)
        start = datetime(2026, 5, 20, 12, 0, tzinfo=timezone.utc)
        await self._add(db_session, user, start, 2.5)
        await self._add(db_session, user, start + timedelta(hours=1), 1.0)

        assert await get_total_playtime_minutes(db_session, user) == 3
