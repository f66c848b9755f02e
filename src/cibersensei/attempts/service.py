"""Answer submission: score a chosen option and finish the attempt."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from cibersensei.attempts.ledger import finish_attempt, get_attempt
from cibersensei.db.models import Attempt
from cibersensei.errors import NotFound
from cibersensei.missions.service import get_mission, parse_payload
from cibersensei.progression.access import ensure_accessible

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnswerResult:
    attempt: Attempt
    correct: bool
    score: int
    correct_choice_id: str
    xp_awarded: int
    already_finished: bool


def score_choice(points: int, correct: bool) -> int:
    return points if correct else 0


async def submit_answer(
    db: AsyncSession,
    user_id: str,
    attempt_id: str,
    choice_id: str,
) -> AnswerResult:
    """Score `choice_id` against the attempt's mission and record the result.

    Raises NotFound for an unknown attempt or choice, LevelLocked when the
    mission is above the learner's unlocked level.
    """
    attempt = await get_attempt(db, user_id, attempt_id)
    mission = await get_mission(db, attempt.mission_id)
    await ensure_accessible(db, user_id, mission)

    payload = parse_payload(mission)
    chosen = next((c for c in payload.choices if c.id == choice_id), None)
    if chosen is None:
        raise NotFound(f"Choice {choice_id} not found in mission {mission.id}")

    correct = chosen.is_correct
    score = score_choice(payload.scoring.points, correct)
    outcome = await finish_attempt(db, user_id, attempt_id, correct, score)

    stored = outcome.attempt.result or {"correct": correct, "score": score}
    logger.info(
        "Answer recorded: attempt=%s correct=%s score=%d repeat=%s",
        attempt_id, stored["correct"], stored["score"], outcome.already_finished,
    )
    return AnswerResult(
        attempt=outcome.attempt,
        correct=stored["correct"],
        score=stored["score"],
        correct_choice_id=payload.correct_choice().id,
        xp_awarded=outcome.xp_awarded,
        already_finished=outcome.already_finished,
    )
