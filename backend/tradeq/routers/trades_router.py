"""
Trades Router

- POST /trades: validate and enqueue a trade record
- GET /stats/{account}: current trade count and profit for an account
"""

import logging

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from tradeq.database import get_db
from tradeq.schemas import AccountStatsResponse, TradeRequest
from tradeq.services.ingestion_service import enqueue_trade
from tradeq.services.stats_aggregator import get_account_stats

logger = logging.getLogger(__name__)

router = APIRouter(tags=["trades"])


@router.post("/trades", status_code=200)
async def submit_trade(trade: TradeRequest, db: AsyncSession = Depends(get_db)):
    """
    Queue a trade for aggregation.

    Returns an empty 200 once the trade is durably queued. ValidationError
    (400) and StorageError (500) are mapped by the global handler.
    """
    await enqueue_trade(db, trade)
    return Response(status_code=200)


@router.get("/stats/{account}", response_model=AccountStatsResponse)
async def read_account_stats(account: str, db: AsyncSession = Depends(get_db)):
    """Stats for an account; zeros if it has no processed trades yet."""
    return await get_account_stats(db, account)
