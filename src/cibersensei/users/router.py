"""Profile router: registration and own profile."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from cibersensei.auth.dependencies import Identity, get_current_identity
from cibersensei.database import get_session
from cibersensei.db.models import Profile
from cibersensei.users.schemas import ProfileResponse, RegisterRequest
from cibersensei.users.service import get_profile, register_learner

logger = structlog.get_logger()

router = APIRouter(prefix="/api/v1", tags=["Profile"])


def _profile_response(profile: Profile) -> ProfileResponse:
    return ProfileResponse(id=profile.id, username=profile.username, created_at=profile.created_at)


@router.post("/profile", response_model=ProfileResponse, status_code=201)
async def register(
    body: RegisterRequest,
    response: Response,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_session),
) -> ProfileResponse:
    """Register the signed-in learner. Repeating the call returns the existing profile."""
    profile, created = await register_learner(db, identity.user_id, body.username)
    await db.commit()
    if created:
        logger.info("profile_created", user_id=identity.user_id)
    else:
        response.status_code = 200
    return _profile_response(profile)


@router.get("/profile", response_model=ProfileResponse)
async def read_profile(
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_session),
) -> ProfileResponse:
    """Get own profile."""
    return _profile_response(await get_profile(db, identity.user_id))
