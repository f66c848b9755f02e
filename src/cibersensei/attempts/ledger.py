"""Attempt ledger: the source of truth for completion and scoring.

Lifecycle: a row is appended when a mission screen is entered and finished
at most once when an answer is submitted. Rows are never deleted, and the
same mission may be started any number of times.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from cibersensei.db.models import Attempt, Mission
from cibersensei.errors import NotFound
from cibersensei.missions.service import get_mission
from cibersensei.progression.access import ensure_accessible
from cibersensei.stats.xp_service import grant_xp

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FinishOutcome:
    attempt: Attempt
    already_finished: bool
    xp_awarded: int


async def start_attempt(db: AsyncSession, user_id: str, mission_id: str) -> Attempt:
    """Open a new attempt. Raises NotFound or LevelLocked.

    No dedup: entering the same mission twice opens two attempts.
    """
    mission = await get_mission(db, mission_id)
    await ensure_accessible(db, user_id, mission)

    attempt = Attempt(
        user_id=user_id,
        mission_id=mission.id,
        started_at=datetime.now(timezone.utc),
        finished_at=None,
        correct=None,
        score=None,
    )
    db.add(attempt)
    await db.flush()
    logger.info("Attempt %s started: user=%s mission=%s level=%d", attempt.id, user_id, mission.id, mission.level)
    return attempt


async def get_attempt(db: AsyncSession, user_id: str, attempt_id: str) -> Attempt:
    """Fetch one of the learner's attempts, reloading it from the database."""
    attempt = await db.get(Attempt, attempt_id, populate_existing=True)
    if attempt is None or attempt.user_id != user_id:
        raise NotFound(f"Attempt {attempt_id} not found")
    return attempt


async def finish_attempt(
    db: AsyncSession,
    user_id: str,
    attempt_id: str,
    correct: bool,
    score: int,
) -> FinishOutcome:
    """Record the result of an attempt.

    The write only applies to an attempt that is still open, so a retried
    submit leaves the first result in place and grants no second XP award.
    A correct result adds `score` to the learner's XP through the atomic
    counter increment.
    """
    now = datetime.now(timezone.utc)
    result = await db.execute(
        update(Attempt)
        .where(
            Attempt.id == attempt_id,
            Attempt.user_id == user_id,
            Attempt.finished_at.is_(None),
        )
        .values(finished_at=now, correct=correct, score=score)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        attempt = await get_attempt(db, user_id, attempt_id)
        logger.info("Attempt %s already finished, ignoring repeated submit", attempt_id)
        return FinishOutcome(attempt=attempt, already_finished=True, xp_awarded=0)

    xp_awarded = 0
    if correct and score > 0:
        granted = await grant_xp(
            db,
            user_id=user_id,
            amount=score,
            source="mission",
            source_id=attempt_id,
            description="Correct answer",
            idempotency_key=f"attempt:{attempt_id}",
        )
        if granted:
            xp_awarded = score

    attempt = await get_attempt(db, user_id, attempt_id)
    return FinishOutcome(attempt=attempt, already_finished=False, xp_awarded=xp_awarded)


async def list_attempts(
    db: AsyncSession,
    user_id: str,
    mission_id: str | None = None,
    level: int | None = None,
) -> list[Attempt]:
    """All attempts of a learner, oldest first, optionally for one mission or one level."""
    stmt = select(Attempt).where(Attempt.user_id == user_id)
    if mission_id is not None:
        stmt = stmt.where(Attempt.mission_id == mission_id)
    if level is not None:
        stmt = stmt.join(Mission, Attempt.mission_id == Mission.id).where(Mission.level == level)
    stmt = stmt.order_by(Attempt.started_at.asc(), Attempt.id.asc())

    result = await db.execute(stmt)
    return list(result.unique().scalars().all())


async def completed_mission_ids(db: AsyncSession, user_id: str, level: int | None = None) -> set[str]:
    """Ids of missions with at least one correct attempt."""
    stmt = select(Attempt.mission_id).where(
        Attempt.user_id == user_id,
        Attempt.correct.is_(True),
    )
    if level is not None:
        stmt = stmt.join(Mission, Attempt.mission_id == Mission.id).where(Mission.level == level)

    result = await db.execute(stmt.distinct())
    return set(result.scalars().all())
