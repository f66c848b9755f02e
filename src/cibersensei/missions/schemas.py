"""Pydantic schemas for missions and mission authoring."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

MISSION_TYPES = ("Basico", "Intermedio", "dificil", "Experto", "Master")


class Choice(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., min_length=1, max_length=8)
    text: str = Field(..., min_length=1)
    is_correct: bool = Field(False, alias="isCorrect")


class Scoring(BaseModel):
    points: int = Field(..., gt=0)


class QuizPayload(BaseModel):
    """Question content. Exactly one choice must be correct."""

    title: str = Field(..., min_length=1, max_length=200)
    question: str = Field(..., min_length=1)
    choices: list[Choice] = Field(..., min_length=2)
    scoring: Scoring
    time_ms: int = Field(..., gt=0)

    @field_validator("choices")
    @classmethod
    def _unique_choice_ids(cls, choices: list[Choice]) -> list[Choice]:
        ids = [c.id for c in choices]
        if len(set(ids)) != len(ids):
            raise ValueError("choice ids must be unique")
        return choices

    @model_validator(mode="after")
    def _exactly_one_correct(self) -> QuizPayload:
        correct = sum(1 for c in self.choices if c.is_correct)
        if correct != 1:
            raise ValueError(f"exactly one choice must be correct, found {correct}")
        return self

    def correct_choice(self) -> Choice:
        return next(c for c in self.choices if c.is_correct)

    def to_storage(self) -> dict:
        """Payload as stored in the missions table (camelCase choice flag)."""
        return self.model_dump(by_alias=True)


class MissionCreate(BaseModel):
    """Authoring input for a mission."""

    id: str = Field(..., min_length=1, max_length=64)
    level: int = Field(..., gt=0)
    type: str
    payload: QuizPayload

    @field_validator("type")
    @classmethod
    def _known_type(cls, value: str) -> str:
        if value not in MISSION_TYPES:
            raise ValueError(f"unknown mission type {value!r}")
        return value


# --- Responses ---


class ChoiceResponse(BaseModel):
    id: str
    text: str


class MissionResponse(BaseModel):
    """Mission as shown while answering. Correctness flags are never sent."""

    id: str
    level: int
    type: str
    title: str
    question: str
    choices: list[ChoiceResponse]
    points: int
    time_ms: int


class MissionTile(BaseModel):
    id: str
    level: int
    type: str
    title: str | None = None
    locked: bool


class StageOverview(BaseModel):
    title: str
    style: str
    min_level: int
    max_level: int
    missions: list[MissionTile]
    ascension_test: MissionTile | None = None


class LevelOverviewResponse(BaseModel):
    unlocked_level: int
    stages: list[StageOverview]


class NextMissionResponse(BaseModel):
    """What to present after a correct answer.

    `mission` is None once the path is complete, or while the target level is
    still locked for the learner (`locked` is then true).
    """

    path_complete: bool
    target_level: int
    locked: bool = False
    mission: MissionResponse | None = None
