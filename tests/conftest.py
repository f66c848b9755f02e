"""Shared test fixtures.

Tests run against an in-memory SQLite database built from ORM metadata.
Redis is left uninitialised, which exercises the fail-open paths of the
rate limiter and the leaderboard cache.
"""

from __future__ import annotations

import os
import uuid
from collections.abc import AsyncGenerator, Awaitable, Callable

os.environ["CIBERSENSEI_DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["CIBERSENSEI_JWT_SECRET"] = "test-secret-not-for-production"
os.environ["CIBERSENSEI_LOG_FORMAT"] = "console"
os.environ["CIBERSENSEI_SEED_BADGES_ON_STARTUP"] = "false"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from cibersensei.auth.jwt import create_access_token
from cibersensei.config import get_settings
from cibersensei.database import close_db, create_schema, get_session, init_db
from cibersensei.missions.schemas import MissionCreate
from cibersensei.missions.service import upsert_mission
from cibersensei.users.service import register_learner

get_settings.cache_clear()


def quiz_payload(title: str = "Phishing", points: int = 10, correct: str = "a") -> dict:
    """A valid three-choice payload with `correct` as the right answer."""
    return {
        "title": title,
        "question": f"{title}: ¿cuál es la respuesta segura?",
        "choices": [
            {"id": cid, "text": f"Opción {cid}", "isCorrect": cid == correct}
            for cid in ("a", "b", "c")
        ],
        "scoring": {"points": points},
        "time_ms": 30000,
    }


@pytest_asyncio.fixture
async def database() -> AsyncGenerator[None, None]:
    """Fresh in-memory schema for each test."""
    await init_db(get_settings().database_url)
    await create_schema()
    yield
    await close_db()


@pytest_asyncio.fixture
async def db_session(database: None) -> AsyncGenerator[AsyncSession, None]:
    """Get a direct database session for service calls and assertions."""
    async for session in get_session():
        yield session
        break


@pytest_asyncio.fixture
async def client(database: None) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP test client over the ASGI app."""
    from cibersensei.main import create_app

    app = create_app()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def make_learner(db_session: AsyncSession) -> Callable[..., Awaitable[str]]:
    """Register a learner and return their id."""

    async def _make(username: str) -> str:
        user_id = str(uuid.uuid4())
        await register_learner(db_session, user_id, username)
        await db_session.commit()
        return user_id

    return _make


@pytest.fixture
def make_mission(db_session: AsyncSession) -> Callable[..., Awaitable[str]]:
    """Author a mission through the validated upsert and return its id."""

    async def _make(
        mission_id: str,
        level: int,
        points: int = 10,
        correct: str = "a",
        mission_type: str = "Basico",
    ) -> str:
        data = MissionCreate(
            id=mission_id,
            level=level,
            type=mission_type,
            payload=quiz_payload(title=mission_id, points=points, correct=correct),
        )
        await upsert_mission(db_session, data)
        await db_session.commit()
        return mission_id

    return _make


def auth_headers(user_id: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user_id)}"}


@pytest.fixture
def headers_for() -> Callable[[str], dict[str, str]]:
    """Bearer headers for a learner id."""
    return auth_headers


@pytest.fixture
def make_payload() -> Callable[..., dict]:
    """Factory for valid mission payloads."""
    return quiz_payload
