"""Mission store adapter: fetch by id and by level, plus authoring."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path

from pydantic import TypeAdapter
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cibersensei.db.models import Mission
from cibersensei.errors import NotFound
from cibersensei.missions.schemas import MissionCreate, QuizPayload

logger = logging.getLogger(__name__)


async def get_mission(db: AsyncSession, mission_id: str) -> Mission:
    """Fetch a mission by id. Raises NotFound."""
    mission = await db.get(Mission, mission_id)
    if mission is None:
        raise NotFound(f"Mission {mission_id} not found")
    return mission


async def list_missions(db: AsyncSession) -> list[Mission]:
    """All missions ordered by level, then id."""
    result = await db.execute(select(Mission).order_by(Mission.level.asc(), Mission.id.asc()))
    return list(result.scalars().all())


async def missions_at_level(db: AsyncSession, level: int) -> list[Mission]:
    """Missions sharing `level`, in stable id order."""
    result = await db.execute(
        select(Mission).where(Mission.level == level).order_by(Mission.id.asc())
    )
    return list(result.scalars().all())


async def first_mission_at_level(db: AsyncSession, level: int) -> Mission | None:
    result = await db.execute(
        select(Mission).where(Mission.level == level).order_by(Mission.id.asc()).limit(1)
    )
    return result.scalar_one_or_none()


def parse_payload(mission: Mission) -> QuizPayload:
    """Validated view of a stored payload."""
    return QuizPayload.model_validate(mission.payload)


async def upsert_mission(db: AsyncSession, data: MissionCreate) -> Mission:
    """Insert or replace a mission. The payload was validated when `data` was built."""
    now = datetime.now(timezone.utc)
    mission = await db.get(Mission, data.id)
    if mission is None:
        mission = Mission(id=data.id, created_at=now)
        db.add(mission)
    mission.level = data.level
    mission.type = data.type
    mission.payload = data.payload.to_storage()
    mission.updated_at = now
    await db.flush()
    return mission


async def seed_missions_from_file(db: AsyncSession, path: str | Path) -> int:
    """Load a JSON array of missions. Returns the number of missions written.

    The whole file is validated before anything is written, so a bad entry
    leaves the table untouched.
    """
    raw = json.loads(Path(path).read_text(encoding="utf-8"))
    missions = TypeAdapter(list[MissionCreate]).validate_python(raw)

    for data in missions:
        await upsert_mission(db, data)
    await db.commit()
    logger.info("Seeded %d missions from %s", len(missions), path)
    return len(missions)
