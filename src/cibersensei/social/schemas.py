"""Pydantic schemas for friendship endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class FriendRequestCreate(BaseModel):
    receiver_id: str


class RelationResponse(BaseModel):
    """An edge from the caller's side. `is_requester` tells who sent it."""

    friendship_id: int
    user_id: str
    username: str
    status: str
    is_requester: bool
    streak: int
    created_at: datetime


class FriendsOverviewResponse(BaseModel):
    friends: list[RelationResponse] = []
    incoming: list[RelationResponse] = []
    outgoing: list[RelationResponse] = []


class FriendshipResponse(BaseModel):
    id: int
    requester_id: str
    receiver_id: str
    status: str
    created_at: datetime


class SearchResultResponse(BaseModel):
    user_id: str
    username: str
