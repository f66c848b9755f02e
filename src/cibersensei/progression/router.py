"""Progression endpoints: unlocked level and next mission."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from cibersensei.auth.dependencies import Identity, get_current_identity
from cibersensei.database import get_session
from cibersensei.missions.router import mission_response
from cibersensei.missions.schemas import NextMissionResponse
from cibersensei.progression.engine import get_progress, next_mission
from cibersensei.progression.schemas import ProgressResponse

router = APIRouter(prefix="/api/v1", tags=["Progression"])


@router.get("/progress", response_model=ProgressResponse)
async def progress(
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_session),
) -> ProgressResponse:
    return ProgressResponse(**await get_progress(db, identity.user_id))


@router.get("/missions/{mission_id}/next", response_model=NextMissionResponse)
async def mission_after(
    mission_id: str,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_session),
) -> NextMissionResponse:
    """Mission to present after `mission_id`. `path_complete` is true when nothing is left."""
    result = await next_mission(db, identity.user_id, mission_id)
    return NextMissionResponse(
        path_complete=result.path_complete,
        target_level=result.target_level,
        locked=result.locked,
        mission=mission_response(result.mission) if result.mission else None,
    )
