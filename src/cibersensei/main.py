"""FastAPI application factory."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from cibersensei.attempts.router import router as attempts_router
from cibersensei.badges.router import router as badges_router
from cibersensei.catalog.badges import seed_badges
from cibersensei.config import get_settings
from cibersensei.database import close_db, get_session, init_db
from cibersensei.health.router import router as health_router
from cibersensei.leaderboard.router import router as leaderboard_router
from cibersensei.middleware import setup_middleware
from cibersensei.missions.router import router as missions_router
from cibersensei.missions.service import seed_missions_from_file
from cibersensei.progression.router import router as progression_router
from cibersensei.redis_client import close_redis, init_redis
from cibersensei.social.router import router as social_router
from cibersensei.stats.router import router as stats_router
from cibersensei.users.router import router as users_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup and shutdown lifecycle."""
    settings = get_settings()
    await init_db(settings.database_url)
    await init_redis(settings)

    if settings.seed_badges_on_startup:
        try:
            async for db in get_session():
                await seed_badges(db)
                break
        except Exception:
            logger.warning("Badge seeding failed (tables may not exist yet)", exc_info=True)

    if settings.missions_seed_path:
        async for db in get_session():
            await seed_missions_from_file(db, settings.missions_seed_path)
            break

    yield

    await close_db()
    await close_redis()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="CiberSensei API",
        description="Backend API for CiberSensei, a cybersecurity quiz with stages, XP and friends",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    setup_middleware(app, settings)
    app.include_router(health_router, tags=["Health"])
    app.include_router(users_router)
    app.include_router(missions_router)
    app.include_router(progression_router)
    app.include_router(attempts_router)
    app.include_router(stats_router)
    app.include_router(social_router)
    app.include_router(badges_router)
    app.include_router(leaderboard_router)

    return app


app = create_app()
