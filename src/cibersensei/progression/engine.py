"""Progression engine: what to present after a correct answer.

Priority:
1. another mission at the same level the learner has not completed (id order)
2. otherwise the catalog's next target level (ascension test at a stage's
   last level, next stage's first level after a test, else level + 1)
3. nothing at the target means the learner has finished the content

A pick above the learner's unlocked level is withheld: only its level is
reported, never the question.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from cibersensei.attempts.ledger import completed_mission_ids
from cibersensei.catalog.stages import next_target_level, stage_for
from cibersensei.db.models import Mission
from cibersensei.missions.service import first_mission_at_level, get_mission, missions_at_level
from cibersensei.progression.access import get_unlocked_level, is_accessible
from cibersensei.store.procedures import get_max_completed_level

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NextMission:
    mission: Mission | None
    target_level: int
    path_complete: bool
    locked: bool = False


async def next_mission(db: AsyncSession, user_id: str, just_completed_mission_id: str) -> NextMission:
    """Pick the mission to present after `just_completed_mission_id`."""
    current = await get_mission(db, just_completed_mission_id)
    unlocked = await get_unlocked_level(db, user_id)

    completed = await completed_mission_ids(db, user_id, level=current.level)
    completed.add(current.id)
    for sibling in await missions_at_level(db, current.level):
        if sibling.id not in completed:
            return _offer(sibling, current.level, unlocked)

    target = next_target_level(current.level)
    mission = await first_mission_at_level(db, target)
    if mission is not None:
        return _offer(mission, target, unlocked)

    logger.info("Path complete for user %s after level %d", user_id, current.level)
    return NextMission(mission=None, target_level=target, path_complete=True)


def _offer(mission: Mission, target_level: int, unlocked_level: int) -> NextMission:
    if not is_accessible(mission.level, unlocked_level):
        return NextMission(mission=None, target_level=target_level, path_complete=False, locked=True)
    return NextMission(mission=mission, target_level=target_level, path_complete=False)


async def get_progress(db: AsyncSession, user_id: str) -> dict:
    """Unlocked level plus the stage it belongs to."""
    max_completed = await get_max_completed_level(db, user_id)
    unlocked = max_completed + 1
    stage = stage_for(unlocked)
    return {
        "max_completed_level": max_completed,
        "unlocked_level": unlocked,
        "current_stage": stage.title if stage else None,
    }
