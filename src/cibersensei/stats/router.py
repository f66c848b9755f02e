"""Stats endpoint for the profile screen."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from cibersensei.auth.dependencies import Identity, get_current_identity
from cibersensei.database import get_session
from cibersensei.stats.schemas import StatsResponse
from cibersensei.stats.service import get_user_stats

router = APIRouter(prefix="/api/v1", tags=["Stats"])


@router.get("/stats", response_model=StatsResponse)
async def my_stats(
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_session),
) -> StatsResponse:
    return StatsResponse(**await get_user_stats(db, identity.user_id))
