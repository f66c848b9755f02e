"""Badge endpoints: catalog and the learner's collection."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from cibersensei.auth.dependencies import Identity, get_current_identity
from cibersensei.badges.schemas import BadgeResponse, EarnedBadgeResponse
from cibersensei.badges.service import get_earned_badges, list_badges
from cibersensei.database import get_session

router = APIRouter(prefix="/api/v1", tags=["Badges"])


@router.get("/badges", response_model=list[BadgeResponse])
async def badge_catalog(db: AsyncSession = Depends(get_session)) -> list[BadgeResponse]:
    """All badges (public)."""
    return [
        BadgeResponse(id=b.id, name=b.name, description=b.description, icon=b.icon)
        for b in await list_badges(db)
    ]


@router.get("/badges/me", response_model=list[EarnedBadgeResponse])
async def my_badges(
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_session),
) -> list[EarnedBadgeResponse]:
    """Badges earned by the signed-in learner."""
    return [
        EarnedBadgeResponse(
            id=ub.badge.id,
            name=ub.badge.name,
            description=ub.badge.description,
            icon=ub.badge.icon,
            earned_at=ub.earned_at,
        )
        for ub in await get_earned_badges(db, identity.user_id)
    ]
