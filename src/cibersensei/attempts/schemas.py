"""Pydantic schemas for attempt endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from cibersensei.db.models import Attempt


class AttemptResult(BaseModel):
    correct: bool
    score: int


class AttemptResponse(BaseModel):
    id: str
    user_id: str
    mission_id: str
    started_at: datetime
    finished_at: datetime | None = None
    result: AttemptResult | None = None


class AnswerRequest(BaseModel):
    choice_id: str = Field(..., min_length=1, max_length=8)


class AnswerResponse(BaseModel):
    attempt: AttemptResponse
    correct: bool
    score: int
    correct_choice_id: str
    xp_awarded: int
    already_finished: bool


def attempt_response(attempt: Attempt) -> AttemptResponse:
    result = attempt.result
    return AttemptResponse(
        id=attempt.id,
        user_id=attempt.user_id,
        mission_id=attempt.mission_id,
        started_at=attempt.started_at,
        finished_at=attempt.finished_at,
        result=AttemptResult(**result) if result else None,
    )
