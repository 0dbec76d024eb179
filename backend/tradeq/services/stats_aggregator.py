"""
Stats Aggregator

Folds a claimed trade into its account's running stats and retires the
queue row. Both writes run in the caller's transaction, so the stats change
and the processed flag commit together or not at all.
"""

import logging

from sqlalchemy import select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from tradeq.exceptions import StorageError
from tradeq.models import AccountStats, QueueItem
from tradeq.schemas import AccountStatsResponse

logger = logging.getLogger(__name__)

_UPSERT_DIALECTS = {
    "sqlite": sqlite.insert,
    "postgresql": postgresql.insert,
}


def build_stats_upsert(dialect_name: str, account: str, profit: float):
    """INSERT ... ON CONFLICT(account) DO UPDATE, incrementing in the database."""
    insert_fn = _UPSERT_DIALECTS.get(dialect_name)
    if insert_fn is None:
        raise StorageError(f"Atomic upsert not supported for dialect '{dialect_name}'")

    stmt = insert_fn(AccountStats).values(account=account, trades=1, profit=profit)
    return stmt.on_conflict_do_update(
        index_elements=[AccountStats.account],
        set_={
            "trades": AccountStats.trades + 1,
            "profit": AccountStats.profit + stmt.excluded.profit,
        },
    )


async def apply_trade_to_stats(db: AsyncSession, account: str, profit: float) -> None:
    """Add one trade and its profit to the account's stats, creating the row if needed."""
    stmt = build_stats_upsert(db.get_bind().dialect.name, account, profit)
    try:
        await db.execute(stmt)
    except SQLAlchemyError as e:
        raise StorageError(f"Failed to update stats: {e}") from e


async def mark_processed(db: AsyncSession, item_id: int) -> None:
    """
    Flip a queue row's processed flag.

    The update is conditional on the row still being unprocessed; anything
    other than exactly one changed row means the claim was lost.
    """
    stmt = (
        update(QueueItem)
        .where(QueueItem.id == item_id, QueueItem.processed.is_(False))
        .values(processed=True)
    )
    try:
        result = await db.execute(stmt)
    except SQLAlchemyError as e:
        raise StorageError(f"Failed to mark trade as processed: {e}") from e

    if result.rowcount != 1:
        raise StorageError(f"Trade {item_id} was already processed by another worker")


async def get_account_stats(db: AsyncSession, account: str) -> AccountStatsResponse:
    """Current stats for an account; zeros when it has no processed trades."""
    try:
        result = await db.execute(select(AccountStats).where(AccountStats.account == account))
        stats = result.scalars().first()
    except SQLAlchemyError as e:
        logger.error(f"Failed to get stats for account {account}: {e}")
        raise StorageError("Failed to get stats") from e

    if stats is None:
        return AccountStatsResponse(account=account, trades=0, profit=0.0)
    return AccountStatsResponse.model_validate(stats)
