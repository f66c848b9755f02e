"""XP grants: ledger entry plus atomic counter increment."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cibersensei.db.models import XPLedger
from cibersensei.store.procedures import increment_xp

logger = logging.getLogger(__name__)


async def grant_xp(
    db: AsyncSession,
    user_id: str,
    amount: int,
    source: str,
    source_id: str | None,
    description: str,
    idempotency_key: str,
) -> bool:
    """Grant XP to a learner. Returns True if granted, False if duplicate.

    1. Insert into xp_ledger (idempotency_key is unique)
    2. Increment user_stats.xp server-side
    """
    existing = await db.execute(
        select(XPLedger.id).where(XPLedger.idempotency_key == idempotency_key)
    )
    if existing.scalar_one_or_none() is not None:
        return False

    db.add(XPLedger(
        user_id=user_id,
        amount=amount,
        source=source,
        source_id=source_id,
        description=description,
        idempotency_key=idempotency_key,
        created_at=datetime.now(timezone.utc),
    ))
    await db.flush()

    await increment_xp(db, user_id, amount)
    logger.info("Granted %d XP to %s (%s)", amount, user_id, idempotency_key)
    return True
