"""Liveness, readiness and version endpoints for the CiberSensei API."""

import structlog
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from cibersensei.config import get_settings
from cibersensei.database import get_session
from cibersensei.db.models import Mission
from cibersensei.redis_client import get_redis_optional

router = APIRouter(tags=["Health"])
logger = structlog.get_logger()


@router.get("/health")
async def health() -> dict[str, str]:
    return {"status": "healthy"}


@router.get("/ready")
async def readiness(
    db: AsyncSession = Depends(get_session),  # noqa: B008
) -> JSONResponse:
    """The database is required. Redis is optional: without it the service runs degraded."""
    checks: dict[str, object] = {}

    try:
        checks["missions"] = int((await db.execute(select(func.count()).select_from(Mission))).scalar_one())
        checks["database"] = "ok"
    except Exception as exc:
        logger.warning("ready_database_failed", error=str(exc))
        checks["database"] = f"error: {exc}"
        return JSONResponse(status_code=503, content={"status": "unavailable", "checks": checks})

    redis = get_redis_optional()
    if redis is None:
        checks["redis"] = "not initialised"
    else:
        try:
            await redis.ping()
            checks["redis"] = "ok"
        except Exception as exc:
            checks["redis"] = f"error: {exc}"

    status = "ready" if checks["redis"] == "ok" else "degraded"
    return JSONResponse(content={"status": status, "checks": checks})


@router.get("/version")
async def version() -> dict[str, str]:
    settings = get_settings()
    return {
        "service": "cibersensei-api",
        "version": settings.app_version,
        "environment": settings.environment,
    }
