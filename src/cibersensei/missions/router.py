"""Mission endpoints: level overview, mission detail, starting an attempt."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from cibersensei.attempts.ledger import start_attempt
from cibersensei.attempts.schemas import AttemptResponse, attempt_response
from cibersensei.auth.dependencies import Identity, get_current_identity
from cibersensei.database import get_session
from cibersensei.db.models import Mission
from cibersensei.missions.overview import level_overview
from cibersensei.missions.schemas import ChoiceResponse, LevelOverviewResponse, MissionResponse
from cibersensei.missions.service import get_mission, parse_payload
from cibersensei.progression.access import ensure_accessible

logger = structlog.get_logger()

router = APIRouter(prefix="/api/v1", tags=["Missions"])


def mission_response(mission: Mission) -> MissionResponse:
    """Build a MissionResponse without correctness flags."""
    payload = parse_payload(mission)
    return MissionResponse(
        id=mission.id,
        level=mission.level,
        type=mission.type,
        title=payload.title,
        question=payload.question,
        choices=[ChoiceResponse(id=c.id, text=c.text) for c in payload.choices],
        points=payload.scoring.points,
        time_ms=payload.time_ms,
    )


@router.get("/missions", response_model=LevelOverviewResponse)
async def missions_overview(
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_session),
) -> LevelOverviewResponse:
    """All stages with their missions and lock state for the signed-in learner."""
    return await level_overview(db, identity.user_id)


@router.get("/missions/{mission_id}", response_model=MissionResponse)
async def mission_detail(
    mission_id: str,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_session),
) -> MissionResponse:
    """Question content for an unlocked mission."""
    mission = await get_mission(db, mission_id)
    await ensure_accessible(db, identity.user_id, mission)
    return mission_response(mission)


@router.post("/missions/{mission_id}/attempts", response_model=AttemptResponse, status_code=201)
async def start_mission_attempt(
    mission_id: str,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_session),
) -> AttemptResponse:
    """Open a new attempt. Every call opens a fresh one."""
    attempt = await start_attempt(db, identity.user_id, mission_id)
    await db.commit()
    logger.info("attempt_started", attempt_id=attempt.id, mission_id=mission_id)
    return attempt_response(attempt)
