"""Pydantic schemas for progression endpoints."""

from __future__ import annotations

from pydantic import BaseModel


class ProgressResponse(BaseModel):
    max_completed_level: int
    unlocked_level: int
    current_stage: str | None = None
