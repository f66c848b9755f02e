"""Stats aggregation over the attempt ledger.

Counts are derived from the learner's attempts. XP, daily streak and playtime
come from store procedures. Each runs in its own savepoint and falls back to 0
on its own when the lookup fails; the failed statement is rolled back to the
savepoint so later metrics still see a usable transaction.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Iterable

from sqlalchemy.ext.asyncio import AsyncSession

from cibersensei.attempts.ledger import list_attempts
from cibersensei.db.models import Attempt
from cibersensei.store.procedures import get_daily_streak, get_total_playtime_minutes, get_xp

logger = logging.getLogger(__name__)


def summarize_attempts(attempts: Iterable[Attempt]) -> dict[str, int]:
    """Correct / incorrect counts and distinct completed missions.

    Abandoned attempts (no result) count toward neither total.
    """
    correct = 0
    incorrect = 0
    completed: set[str] = set()
    for attempt in attempts:
        if attempt.finished_at is None:
            continue
        if attempt.correct:
            correct += 1
            completed.add(attempt.mission_id)
        else:
            incorrect += 1
    return {
        "correct_count": correct,
        "incorrect_count": incorrect,
        "missions_completed": len(completed),
    }


async def _metric_or_zero(
    db: AsyncSession, name: str, user_id: str, fetch: Callable[[], Awaitable[int]]
) -> int:
    try:
        async with db.begin_nested():
            return int(await fetch())
    except Exception:
        logger.warning("Stats metric %s failed for %s, defaulting to 0", name, user_id, exc_info=True)
        return 0


async def get_user_stats(db: AsyncSession, user_id: str) -> dict[str, int]:
    """Full stats for the profile screen."""
    attempts = await list_attempts(db, user_id)
    summary = summarize_attempts(attempts)

    summary["xp"] = await _metric_or_zero(db, "xp", user_id, lambda: get_xp(db, user_id))
    summary["streak"] = await _metric_or_zero(db, "streak", user_id, lambda: get_daily_streak(db, user_id))
    summary["time_invested"] = await _metric_or_zero(
        db, "time_invested", user_id, lambda: get_total_playtime_minutes(db, user_id)
    )
    return summary
