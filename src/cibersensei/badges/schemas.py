"""Pydantic schemas for badge endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class BadgeResponse(BaseModel):
    id: str
    name: str
    description: str
    icon: str


class EarnedBadgeResponse(BadgeResponse):
    earned_at: datetime
