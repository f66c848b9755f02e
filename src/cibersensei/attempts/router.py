"""Attempt endpoints: answer submission and history."""

from __future__ import annotations

import uuid

import structlog
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from cibersensei.attempts.ledger import list_attempts
from cibersensei.attempts.schemas import AnswerRequest, AnswerResponse, AttemptResponse, attempt_response
from cibersensei.attempts.service import submit_answer
from cibersensei.auth.dependencies import Identity, get_current_identity
from cibersensei.database import get_session

logger = structlog.get_logger()

router = APIRouter(prefix="/api/v1", tags=["Attempts"])


@router.post("/attempts/{attempt_id}/answer", response_model=AnswerResponse)
async def answer_attempt(
    attempt_id: uuid.UUID,
    body: AnswerRequest,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_session),
) -> AnswerResponse:
    """Submit a choice. A repeated submit returns the first result unchanged."""
    result = await submit_answer(db, identity.user_id, str(attempt_id), body.choice_id)
    await db.commit()
    logger.info(
        "answer_submitted",
        attempt_id=str(attempt_id),
        correct=result.correct,
        xp_awarded=result.xp_awarded,
        already_finished=result.already_finished,
    )
    return AnswerResponse(
        attempt=attempt_response(result.attempt),
        correct=result.correct,
        score=result.score,
        correct_choice_id=result.correct_choice_id,
        xp_awarded=result.xp_awarded,
        already_finished=result.already_finished,
    )


@router.get("/attempts", response_model=list[AttemptResponse])
async def attempt_history(
    mission_id: str | None = Query(None, max_length=64),
    level: int | None = Query(None, ge=1),
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_session),
) -> list[AttemptResponse]:
    """The learner's attempts, oldest first."""
    attempts = await list_attempts(db, identity.user_id, mission_id=mission_id, level=level)
    return [attempt_response(a) for a in attempts]
