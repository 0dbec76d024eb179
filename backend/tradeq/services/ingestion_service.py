"""
Ingestion Service

Validates inbound trade records and appends accepted ones to the trade queue.
Rejected records never reach the database.
"""

import logging
import math

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from tradeq.constants import SYMBOL_PATTERN, VALID_SIDES
from tradeq.exceptions import StorageError, ValidationError
from tradeq.models import QueueItem
from tradeq.schemas import TradeRequest

logger = logging.getLogger(__name__)


def _is_positive(value) -> bool:
    return isinstance(value, (int, float)) and math.isfinite(value) and value > 0


def validate_trade(trade: TradeRequest) -> None:
    """Raise ValidationError for the first rule the trade violates."""
    if not trade.account:
        raise ValidationError("Account must not be empty")

    if not isinstance(trade.symbol, str) or not SYMBOL_PATTERN.fullmatch(trade.symbol):
        raise ValidationError("Symbol must be 6 uppercase letters")

    if not (_is_positive(trade.volume) and _is_positive(trade.open) and _is_positive(trade.close)):
        raise ValidationError("Volume, open and close must be positive")

    if trade.side not in VALID_SIDES:
        raise ValidationError("Side must be either 'buy' or 'sell'")


async def enqueue_trade(db: AsyncSession, trade: TradeRequest) -> QueueItem:
    """
    Validate a trade and append it to the queue as unprocessed.

    The append is a single INSERT committed on its own; on failure it is
    rolled back and StorageError is raised.
    """
    validate_trade(trade)

    item = QueueItem(
        account=trade.account,
        symbol=trade.symbol,
        volume=trade.volume,
        open=trade.open,
        close=trade.close,
        side=trade.side,
        processed=False,
    )
    try:
        db.add(item)
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Failed to enqueue trade for account {trade.account}: {e}")
        raise StorageError("Failed to enqueue trade") from e

    logger.debug(f"Enqueued trade {item.id} ({item.symbol} {item.side}) for account {item.account}")
    return item
