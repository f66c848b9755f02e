"""Friendship endpoints: relations, requests, removal and learner search."""

from __future__ import annotations

import uuid

import structlog
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from cibersensei.auth.dependencies import Identity, get_current_identity
from cibersensei.database import get_session
from cibersensei.db.models import Friendship
from cibersensei.errors import InvalidRequest
from cibersensei.social.friendship_service import (
    Relation,
    friends,
    incoming,
    list_relations,
    outgoing,
    remove,
    respond,
    search_candidates,
    send_request,
)
from cibersensei.social.schemas import (
    FriendRequestCreate,
    FriendshipResponse,
    FriendsOverviewResponse,
    RelationResponse,
    SearchResultResponse,
)

logger = structlog.get_logger()

router = APIRouter(prefix="/api/v1", tags=["Friends"])


# ── Helpers ──


def _relation_response(relation: Relation) -> RelationResponse:
    return RelationResponse(
        friendship_id=relation.friendship_id,
        user_id=relation.other_id,
        username=relation.username,
        status=relation.status,
        is_requester=relation.is_requester,
        streak=relation.streak,
        created_at=relation.created_at,
    )


def _friendship_response(edge: Friendship) -> FriendshipResponse:
    return FriendshipResponse(
        id=edge.id,
        requester_id=edge.requester_id,
        receiver_id=edge.receiver_id,
        status=edge.status,
        created_at=edge.created_at,
    )


def _learner_id(value: str) -> str:
    try:
        return str(uuid.UUID(value))
    except ValueError as e:
        raise InvalidRequest("Learner id must be a UUID") from e


# ── Endpoints ──


@router.get("/friends", response_model=FriendsOverviewResponse)
async def friends_overview(
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_session),
) -> FriendsOverviewResponse:
    """Accepted friends plus pending requests in both directions."""
    relations = await list_relations(db, identity.user_id)
    return FriendsOverviewResponse(
        friends=[_relation_response(r) for r in friends(relations)],
        incoming=[_relation_response(r) for r in incoming(relations)],
        outgoing=[_relation_response(r) for r in outgoing(relations)],
    )


@router.get("/friends/search", response_model=list[SearchResultResponse])
async def search_learners(
    q: str = Query("", max_length=32),
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_session),
) -> list[SearchResultResponse]:
    """Learners whose username contains `q`, excluding the caller."""
    profiles = await search_candidates(db, q, identity.user_id)
    return [SearchResultResponse(user_id=p.id, username=p.username) for p in profiles]


@router.post("/friends/requests", response_model=FriendshipResponse, status_code=201)
async def send_friend_request(
    body: FriendRequestCreate,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_session),
) -> FriendshipResponse:
    """Send a friend request."""
    edge = await send_request(db, identity.user_id, _learner_id(body.receiver_id))
    await db.commit()
    logger.info("friend_request_sent", receiver_id=edge.receiver_id)
    return _friendship_response(edge)


@router.post("/friends/requests/{requester_id}/accept", response_model=FriendshipResponse)
async def accept_friend_request(
    requester_id: uuid.UUID,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_session),
) -> FriendshipResponse:
    """Accept a pending request sent to the caller."""
    edge = await respond(db, str(requester_id), identity.user_id, accept=True)
    await db.commit()
    return _friendship_response(edge)


@router.post("/friends/requests/{requester_id}/decline", status_code=204)
async def decline_friend_request(
    requester_id: uuid.UUID,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_session),
) -> None:
    """Decline a pending request sent to the caller. The request is deleted."""
    await respond(db, str(requester_id), identity.user_id, accept=False)
    await db.commit()


@router.delete("/friends/{other_id}", status_code=204)
async def remove_friend(
    other_id: uuid.UUID,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_session),
) -> None:
    """Remove a friend or withdraw a request, whichever way it points."""
    await remove(db, identity.user_id, str(other_id))
    await db.commit()
