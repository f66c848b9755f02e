"""Mission map grouped by stage, with lock state for one learner."""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from cibersensei.catalog.stages import stages_in_order
from cibersensei.db.models import Mission
from cibersensei.missions.schemas import LevelOverviewResponse, MissionTile, StageOverview
from cibersensei.missions.service import list_missions
from cibersensei.progression.access import get_unlocked_level, is_accessible

logger = logging.getLogger(__name__)


def _tile(mission: Mission, unlocked_level: int) -> MissionTile:
    return MissionTile(
        id=mission.id,
        level=mission.level,
        type=mission.type,
        title=str((mission.payload or {}).get("title") or "Nivel sin título"),
        locked=not is_accessible(mission.level, unlocked_level),
    )


async def level_overview(db: AsyncSession, user_id: str) -> LevelOverviewResponse:
    """Stages in order with their missions; empty stages are left out.

    If the progress lookup fails only level 1 stays open.
    """
    missions = await list_missions(db)

    try:
        async with db.begin_nested():
            unlocked = await get_unlocked_level(db, user_id)
    except Exception:
        logger.warning("Progress lookup failed for %s, defaulting to level 1", user_id, exc_info=True)
        unlocked = 1

    stages: list[StageOverview] = []
    for stage in stages_in_order():
        ordinary = [m for m in missions if stage.min_level <= m.level <= stage.max_level]
        test = next((m for m in missions if m.level == stage.test_level), None)
        if not ordinary and test is None:
            continue
        stages.append(StageOverview(
            title=stage.title,
            style=stage.style,
            min_level=stage.min_level,
            max_level=stage.max_level,
            missions=[_tile(m, unlocked) for m in ordinary],
            ascension_test=_tile(test, unlocked) if test else None,
        ))

    return LevelOverviewResponse(unlocked_level=unlocked, stages=stages)
