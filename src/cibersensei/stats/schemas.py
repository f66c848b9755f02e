"""Pydantic schemas for the stats endpoint."""

from __future__ import annotations

from pydantic import BaseModel


class StatsResponse(BaseModel):
    xp: int
    correct_count: int
    incorrect_count: int
    missions_completed: int
    streak: int
    time_invested: int  # minutes
