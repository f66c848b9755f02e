"""Shared Redis client.

Redis only backs the rate limiter and the leaderboard cache, so every caller
goes through `get_redis_optional` and carries on without it.
"""

import redis.asyncio as redis

from cibersensei.config import Settings

_client: redis.Redis | None = None


async def init_redis(settings: Settings) -> None:
    global _client  # noqa: PLW0603
    _client = redis.from_url(  # type: ignore[no-untyped-call]
        settings.redis_url,
        encoding="utf-8",
        decode_responses=True,
        max_connections=settings.redis_max_connections,
        socket_timeout=settings.redis_socket_timeout_seconds,
    )


async def close_redis() -> None:
    global _client  # noqa: PLW0603
    if _client is not None:
        await _client.aclose()
        _client = None


def get_redis_optional() -> redis.Redis | None:
    """The client, or None before `init_redis` (tests, scripts)."""
    return _client
