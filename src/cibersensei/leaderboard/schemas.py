"""Pydantic schemas for the leaderboard endpoint."""

from __future__ import annotations

from pydantic import BaseModel


class LeaderboardEntry(BaseModel):
    rank: int
    user_id: str
    username: str
    xp: int
