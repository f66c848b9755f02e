"""Learner registration and profile lookup."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from cibersensei.db.models import Profile, UserStats
from cibersensei.errors import Duplicate, NotFound

logger = logging.getLogger(__name__)


async def get_profile(db: AsyncSession, user_id: str) -> Profile:
    """Fetch a learner's profile. Raises NotFound."""
    profile = await db.get(Profile, user_id)
    if profile is None:
        raise NotFound("Profile not found, register first")
    return profile


async def register_learner(db: AsyncSession, user_id: str, username: str) -> tuple[Profile, bool]:
    """
    Create the profile and stats rows for a learner if they are absent.

    Calling it again for a registered learner changes nothing and returns the
    stored profile.

    Returns:
        Tuple of (profile, created).

    Raises:
        Duplicate: If the username is taken by another learner (case-insensitive).
    """
    existing = await db.get(Profile, user_id)
    if existing is not None:
        return existing, False

    normalized = username.lower()
    taken = await db.execute(select(Profile.id).where(Profile.username_normalized == normalized))
    if taken.scalar_one_or_none() is not None:
        raise Duplicate("Username already taken")

    now = datetime.now(timezone.utc)
    profile = Profile(id=user_id, username=username, username_normalized=normalized, created_at=now)
    db.add(profile)
    try:
        await db.flush()
        db.add(UserStats(user_id=user_id, xp=0, updated_at=now))
        await db.flush()
    except IntegrityError as e:
        await db.rollback()
        raise Duplicate("Username already taken") from e

    logger.info("Learner registered: %s (%s)", user_id, username)
    return profile, True
