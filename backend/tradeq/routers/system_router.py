"""
System Router

Health check and embedded worker status.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from tradeq.database import get_db, ping_db
from tradeq.exceptions import ServiceUnavailableError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["system"])

# Set by main.py when the API runs an embedded worker
_trade_worker = None


def set_trade_worker(worker):
    global _trade_worker
    _trade_worker = worker


@router.get("/healthz")
async def healthz(db: AsyncSession = Depends(get_db)):
    try:
        await ping_db(db)
    except (SQLAlchemyError, OSError) as e:
        logger.warning(f"Health check failed: {e}")
        raise ServiceUnavailableError("Database not available") from e
    return {"status": "ok"}


@router.get("/worker/status")
async def worker_status():
    if _trade_worker is None:
        return {"running": False, "embedded": False}
    return {**_trade_worker.get_status(), "embedded": True}
