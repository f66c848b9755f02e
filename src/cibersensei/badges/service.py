"""Badge catalog and membership reads."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cibersensei.db.models import Badge, UserBadge


async def list_badges(db: AsyncSession) -> list[Badge]:
    """The full badge catalog in display order."""
    result = await db.execute(select(Badge).order_by(Badge.sort_order.asc(), Badge.id.asc()))
    return list(result.scalars().all())


async def get_earned_badges(db: AsyncSession, user_id: str) -> list[UserBadge]:
    """Badges the learner holds, earliest first."""
    result = await db.execute(
        select(UserBadge)
        .where(UserBadge.user_id == user_id)
        .order_by(UserBadge.earned_at.asc(), UserBadge.id.asc())
    )
    return list(result.unique().scalars().all())
