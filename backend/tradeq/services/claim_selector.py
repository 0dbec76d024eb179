"""
Claim Selector

Picks the oldest unprocessed trade inside the caller's transaction and locks
it until that transaction ends.

Locking depends on the engine:
- PostgreSQL: SELECT ... FOR UPDATE (or FOR UPDATE SKIP LOCKED when
  skip_locked=True, letting concurrent workers pass over claimed rows).
- SQLite: FOR UPDATE is not emitted; the session's BEGIN IMMEDIATE already
  holds the database write lock, so competing workers wait their turn.
"""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from tradeq.exceptions import StorageError
from tradeq.models import QueueItem

logger = logging.getLogger(__name__)


def build_claim_query(skip_locked: bool = False):
    return (
        select(QueueItem)
        .where(QueueItem.processed.is_(False))
        .order_by(QueueItem.created_at.asc(), QueueItem.id.asc())
        .limit(1)
        .with_for_update(skip_locked=skip_locked)
    )


async def claim_next_trade(db: AsyncSession, skip_locked: bool = False) -> Optional[QueueItem]:
    """
    Claim the oldest unprocessed trade.

    Returns:
        The locked QueueItem, or None when the queue is empty.

    Raises:
        StorageError: the transaction could not be opened or the query failed.
    """
    try:
        result = await db.execute(build_claim_query(skip_locked))
    except SQLAlchemyError as e:
        raise StorageError(f"Failed to query trades: {e}") from e

    return result.scalars().first()
