"""Store-side procedures the core depends on.

These run as single SQL statements (or one read plus a pure reduction) so the
callers never do read-modify-write against shared counters.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

from sqlalchemy import func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from cibersensei.db.models import Attempt, Friendship, Mission, Profile, UserStats


def as_utc(dt: datetime) -> datetime:
    """SQLite hands back naive datetimes; treat them as UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


async def increment_xp(db: AsyncSession, user_id: str, amount: int) -> None:
    """Atomically add `amount` to the learner's XP counter."""
    now = datetime.now(timezone.utc)
    result = await db.execute(
        update(UserStats)
        .where(UserStats.user_id == user_id)
        .values(xp=UserStats.xp + amount, updated_at=now)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        # Learner registered before the stats row existed
        db.add(UserStats(user_id=user_id, xp=amount, updated_at=now))
        await db.flush()


async def get_xp(db: AsyncSession, user_id: str) -> int:
    result = await db.execute(select(UserStats.xp).where(UserStats.user_id == user_id))
    return int(result.scalar_one_or_none() or 0)


async def get_max_completed_level(db: AsyncSession, user_id: str) -> int:
    """Highest mission level with a correct attempt, 0 when there is none."""
    result = await db.execute(
        select(func.max(Mission.level))
        .select_from(Attempt)
        .join(Mission, Attempt.mission_id == Mission.id)
        .where(Attempt.user_id == user_id, Attempt.correct.is_(True))
    )
    return int(result.scalar() or 0)


def compute_daily_streak(activity_days: set[date], today: date) -> int:
    """Consecutive days with activity ending today.

    A streak that ended yesterday still counts until today is over.
    """
    if today in activity_days:
        cursor = today
    elif today - timedelta(days=1) in activity_days:
        cursor = today - timedelta(days=1)
    else:
        return 0

    streak = 0
    while cursor in activity_days:
        streak += 1
        cursor -= timedelta(days=1)
    return streak


async def get_daily_streak(db: AsyncSession, user_id: str, now: datetime | None = None) -> int:
    """Daily streak over UTC days with at least one answered attempt."""
    if now is None:
        now = datetime.now(timezone.utc)

    result = await db.execute(
        select(Attempt.finished_at).where(
            Attempt.user_id == user_id,
            Attempt.finished_at.is_not(None),
        )
    )
    days = {as_utc(finished).date() for finished in result.scalars()}
    return compute_daily_streak(days, as_utc(now).date())


async def get_total_playtime_minutes(db: AsyncSession, user_id: str) -> int:
    """Whole minutes spent between start and finish across answered attempts."""
    result = await db.execute(
        select(Attempt.started_at, Attempt.finished_at).where(
            Attempt.user_id == user_id,
            Attempt.finished_at.is_not(None),
        )
    )
    total_seconds = 0.0
    for started_at, finished_at in result:
        elapsed = (as_utc(finished_at) - as_utc(started_at)).total_seconds()
        total_seconds += max(elapsed, 0.0)
    return int(total_seconds // 60)


async def get_all_friend_relations(
    db: AsyncSession, user_id: str
) -> list[tuple[Friendship, Profile]]:
    """Every edge touching `user_id`, paired with the other learner's profile."""
    other = aliased(Profile)
    result = await db.execute(
        select(Friendship, other)
        .join(
            other,
            or_(
                (Friendship.requester_id == user_id) & (other.id == Friendship.receiver_id),
                (Friendship.receiver_id == user_id) & (other.id == Friendship.requester_id),
            ),
        )
        .order_by(Friendship.created_at.asc(), Friendship.id.asc())
    )
    return [(row[0], row[1]) for row in result]
