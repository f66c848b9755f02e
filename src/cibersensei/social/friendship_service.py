"""Friendship graph business logic.

Rules:
- One edge per unordered pair of learners, in any status
- Edges are directed: the requester sent it, the receiver answers it
- Only the receiver may accept or decline a pending request
- Declining deletes the edge; removing deletes it from either side
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy import delete, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from cibersensei.config import get_settings
from cibersensei.db.models import Friendship, Profile
from cibersensei.errors import Duplicate, InvalidRequest, NotFound
from cibersensei.store.procedures import get_all_friend_relations, get_daily_streak

logger = logging.getLogger(__name__)

STATUS_PENDING = "pending"
STATUS_ACCEPTED = "accepted"
STATUS_BLOCKED = "blocked"


@dataclass(frozen=True)
class Relation:
    """An edge seen from one learner's side."""

    friendship_id: int
    other_id: str
    username: str
    status: str
    is_requester: bool
    streak: int
    created_at: datetime


def make_pair_key(a: str, b: str) -> str:
    """Order-independent key for a pair of learner ids."""
    first, second = sorted((str(a).lower(), str(b).lower()))
    return f"{first}:{second}"


def incoming(relations: list[Relation]) -> list[Relation]:
    """Pending requests waiting for this learner's answer."""
    return [r for r in relations if r.status == STATUS_PENDING and not r.is_requester]


def outgoing(relations: list[Relation]) -> list[Relation]:
    """Pending requests this learner sent."""
    return [r for r in relations if r.status == STATUS_PENDING and r.is_requester]


def friends(relations: list[Relation]) -> list[Relation]:
    return [r for r in relations if r.status == STATUS_ACCEPTED]


async def get_edge(db: AsyncSession, a: str, b: str) -> Friendship | None:
    """The edge between two learners, whichever way it points."""
    result = await db.execute(
        select(Friendship).where(Friendship.pair_key == make_pair_key(a, b))
    )
    return result.scalar_one_or_none()


async def send_request(db: AsyncSession, from_id: str, to_id: str) -> Friendship:
    """Create a pending edge from `from_id` to `to_id`.

    Raises:
        InvalidRequest: request to oneself.
        NotFound: either learner has no profile.
        Duplicate: an edge already exists for the pair, in either direction.
    """
    if str(from_id).lower() == str(to_id).lower():
        raise InvalidRequest("You cannot send a friend request to yourself")

    if await db.get(Profile, from_id) is None:
        raise NotFound("Create your profile before sending friend requests")
    if await db.get(Profile, to_id) is None:
        raise NotFound(f"Learner {to_id} not found")

    # Fast path; the pair_key constraint settles concurrent requests
    if await get_edge(db, from_id, to_id) is not None:
        raise Duplicate("A friend request already exists for this pair")

    now = datetime.now(timezone.utc)
    edge = Friendship(
        requester_id=from_id,
        receiver_id=to_id,
        status=STATUS_PENDING,
        pair_key=make_pair_key(from_id, to_id),
        created_at=now,
        updated_at=now,
    )
    db.add(edge)
    try:
        await db.flush()
    except IntegrityError as e:
        await db.rollback()
        # Only a lost race on pair_key is a duplicate
        existing = await db.execute(
            select(Friendship.id).where(Friendship.pair_key == make_pair_key(from_id, to_id))
        )
        if existing.scalar_one_or_none() is None:
            raise
        raise Duplicate("A friend request already exists for this pair") from e

    logger.info("Friend request sent: %s -> %s", from_id, to_id)
    return edge


async def respond(db: AsyncSession, requester_id: str, receiver_id: str, accept: bool) -> Friendship | None:
    """Accept or decline a pending request sent by `requester_id`.

    Returns the accepted edge, or None after a decline.
    Raises NotFound unless a pending edge exists in exactly that direction.
    """
    result = await db.execute(
        select(Friendship).where(
            Friendship.requester_id == requester_id,
            Friendship.receiver_id == receiver_id,
            Friendship.status == STATUS_PENDING,
        )
    )
    edge = result.scalar_one_or_none()
    if edge is None:
        raise NotFound("No pending friend request from this learner")

    if accept:
        edge.status = STATUS_ACCEPTED
        edge.updated_at = datetime.now(timezone.utc)
        await db.flush()
        logger.info("Friend request accepted: %s -> %s", requester_id, receiver_id)
        return edge

    await db.delete(edge)
    await db.flush()
    logger.info("Friend request declined: %s -> %s", requester_id, receiver_id)
    return None


async def remove(db: AsyncSession, user_id: str, other_id: str) -> None:
    """Delete the edge between two learners regardless of direction or status."""
    result = await db.execute(
        delete(Friendship)
        .where(
            or_(
                (Friendship.requester_id == user_id) & (Friendship.receiver_id == other_id),
                (Friendship.requester_id == other_id) & (Friendship.receiver_id == user_id),
            )
        )
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        raise NotFound("No friendship with this learner")
    logger.info("Friendship removed: %s x %s", user_id, other_id)


async def _streak_or_zero(db: AsyncSession, user_id: str) -> int:
    try:
        async with db.begin_nested():
            return await get_daily_streak(db, user_id)
    except Exception:
        logger.warning("Streak lookup failed for %s, showing 0", user_id, exc_info=True)
        return 0


async def list_relations(db: AsyncSession, user_id: str) -> list[Relation]:
    """Every edge touching `user_id`, oldest first, with the other learner's streak."""
    relations = []
    for edge, other in await get_all_friend_relations(db, user_id):
        relations.append(Relation(
            friendship_id=edge.id,
            other_id=other.id,
            username=other.username,
            status=edge.status,
            is_requester=edge.requester_id == user_id,
            streak=await _streak_or_zero(db, other.id),
            created_at=edge.created_at,
        ))
    return relations


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


async def search_candidates(
    db: AsyncSession,
    query: str,
    exclude_user_id: str,
    limit: int | None = None,
) -> list[Profile]:
    """Learners whose username contains `query`, case-insensitive, excluding the caller."""
    term = (query or "").strip().lower()
    if not term:
        return []
    if limit is None:
        limit = get_settings().friend_search_limit

    result = await db.execute(
        select(Profile)
        .where(
            Profile.username_normalized.like(f"%{_escape_like(term)}%", escape="\\"),
            Profile.id != exclude_user_id,
        )
        .order_by(Profile.username_normalized.asc())
        .limit(limit)
    )
    return list(result.scalars().all())
