"""Level gate: which levels a learner may open.

The unlocked level is never stored. It is recomputed from the attempt ledger
on every read, so it can only move forward as correct attempts accumulate.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from cibersensei.db.models import Mission
from cibersensei.errors import LevelLocked
from cibersensei.store.procedures import get_max_completed_level


async def get_unlocked_level(db: AsyncSession, user_id: str) -> int:
    """One past the highest completed level; 1 for a learner with no correct attempts."""
    return await get_max_completed_level(db, user_id) + 1


def is_accessible(level: int, unlocked_level: int) -> bool:
    return level <= unlocked_level


async def ensure_accessible(db: AsyncSession, user_id: str, mission: Mission) -> int:
    """Raise LevelLocked unless the learner may open `mission`. Returns the unlocked level."""
    unlocked = await get_unlocked_level(db, user_id)
    if not is_accessible(mission.level, unlocked):
        raise LevelLocked(mission.level, unlocked)
    return unlocked
