"""Global XP leaderboard with a short Redis cache-aside."""

from __future__ import annotations

import json
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cibersensei.config import get_settings
from cibersensei.db.models import Profile, UserStats

logger = logging.getLogger(__name__)

LEADERBOARD_CACHE_PREFIX = "leaderboard:xp"


async def _read_cache(redis: object, key: str) -> list[dict] | None:
    if redis is None:
        return None
    try:
        cached = await redis.get(key)  # type: ignore[union-attr]
    except Exception:
        logger.warning("Failed to read leaderboard cache", exc_info=True)
        return None
    return json.loads(cached) if cached else None


async def _write_cache(redis: object, key: str, entries: list[dict]) -> None:
    if redis is None:
        return
    try:
        ttl = get_settings().leaderboard_cache_ttl_seconds
        await redis.setex(key, ttl, json.dumps(entries))  # type: ignore[union-attr]
    except Exception:
        logger.warning("Failed to cache leaderboard", exc_info=True)


async def top_learners(db: AsyncSession, redis: object, limit: int | None = None) -> list[dict]:
    """Top learners by XP, then username. Each entry is `{rank, user_id, username, xp}`."""
    if limit is None:
        limit = get_settings().leaderboard_size

    cache_key = f"{LEADERBOARD_CACHE_PREFIX}:{limit}"
    cached = await _read_cache(redis, cache_key)
    if cached is not None:
        return cached

    result = await db.execute(
        select(UserStats.user_id, Profile.username, UserStats.xp)
        .join(Profile, Profile.id == UserStats.user_id)
        .order_by(UserStats.xp.desc(), Profile.username_normalized.asc())
        .limit(limit)
    )
    entries = [
        {"rank": idx + 1, "user_id": row.user_id, "username": row.username, "xp": int(row.xp)}
        for idx, row in enumerate(result.all())
    ]

    await _write_cache(redis, cache_key, entries)
    return entries
