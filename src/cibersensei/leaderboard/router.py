"""Leaderboard endpoint (public)."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from cibersensei.database import get_session
from cibersensei.leaderboard.schemas import LeaderboardEntry
from cibersensei.leaderboard.service import top_learners
from cibersensei.redis_client import get_redis_optional

router = APIRouter(prefix="/api/v1", tags=["Leaderboard"])


@router.get("/leaderboard", response_model=list[LeaderboardEntry])
async def leaderboard(
    limit: int | None = Query(None, ge=1, le=100),
    db: AsyncSession = Depends(get_session),
) -> list[LeaderboardEntry]:
    """Top learners by XP."""
    entries = await top_learners(db, get_redis_optional(), limit)
    return [LeaderboardEntry(**e) for e in entries]
