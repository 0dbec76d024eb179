"""
Trade Worker

Background loop that drains the trade queue into account stats, one trade
per cycle:

    IDLE -> CLAIMING -> PROCESSING -> COMMITTING -> BACKOFF -> IDLE
                  \\-> BACKOFF (empty queue or failure)

Claim, stats upsert and processed flag share one transaction. Any failure
rolls that transaction back whole and the trade is retried next cycle, so a
crash or error can never count a trade twice or leave it half-applied.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from tradeq.config import settings
from tradeq.database import begin_write_transaction
from tradeq.exceptions import StorageError
from tradeq.services.claim_selector import claim_next_trade
from tradeq.services.profit_calculator import calculate_profit
from tradeq.services.stats_aggregator import apply_trade_to_stats, mark_processed

logger = logging.getLogger(__name__)


class WorkerState(str, Enum):
    STOPPED = "stopped"
    IDLE = "idle"
    CLAIMING = "claiming"
    PROCESSING = "processing"
    COMMITTING = "committing"
    BACKOFF = "backoff"


class CycleOutcome(str, Enum):
    PROCESSED = "processed"
    EMPTY = "empty"
    FAILED = "failed"


@dataclass
class CycleResult:
    outcome: CycleOutcome
    trade_id: Optional[int] = None
    account: Optional[str] = None
    profit: Optional[float] = None
    error: Optional[str] = None


class TradeWorker:
    """
    Claims, processes and retires queued trades.

    Several workers may share one database: claims are exclusive, and by
    default a worker blocks on a claimed row instead of skipping it, which
    keeps strict arrival order.
    """

    def __init__(
        self,
        session_maker: Optional[async_sessionmaker] = None,
        poll_interval_seconds: Optional[float] = None,
        skip_locked: Optional[bool] = None,
        name: str = "worker",
    ):
        self._session_maker = session_maker
        self.poll_interval_seconds = (
            settings.poll_interval_seconds if poll_interval_seconds is None else poll_interval_seconds
        )
        self.skip_locked = settings.worker_skip_locked if skip_locked is None else skip_locked
        self.name = name

        self.state = WorkerState.STOPPED
        self.running = False
        self.task: Optional[asyncio.Task] = None

        self.processed_count = 0
        self.empty_polls = 0
        self.failed_cycles = 0
        self.last_trade_id: Optional[int] = None
        self.last_processed_at: Optional[datetime] = None
        self.last_error: Optional[str] = None

    @property
    def session_maker(self) -> async_sessionmaker:
        # Resolved lazily so configure_database() rebinding is picked up
        if self._session_maker is not None:
            return self._session_maker
        from tradeq import database

        return database.async_session_maker

    async def run_cycle(self) -> CycleResult:
        """Run one claim/process/commit cycle. Never raises for storage failures."""
        self.state = WorkerState.CLAIMING
        step = "begin transaction"
        try:
            async with self.session_maker() as db:
                try:
                    await begin_write_transaction(db)

                    step = "claim trade"
                    item = await claim_next_trade(db, skip_locked=self.skip_locked)
                    if item is None:
                        await db.rollback()
                        self.empty_polls += 1
                        return CycleResult(outcome=CycleOutcome.EMPTY)

                    self.state = WorkerState.PROCESSING
                    trade_id, account = item.id, item.account
                    profit = calculate_profit(item.volume, item.open, item.close, item.side)

                    step = "update stats"
                    await apply_trade_to_stats(db, account, profit)

                    step = "mark processed"
                    await mark_processed(db, trade_id)

                    self.state = WorkerState.COMMITTING
                    step = "commit"
                    try:
                        await db.commit()
                    except SQLAlchemyError as e:
                        raise StorageError(f"Failed to commit transaction: {e}") from e
                except Exception:
                    await db.rollback()
                    raise
        except (StorageError, SQLAlchemyError) as e:
            self.failed_cycles += 1
            self.last_error = str(e)
            logger.error(f"[{self.name}] Cycle failed at '{step}', rolled back: {e}")
            return CycleResult(outcome=CycleOutcome.FAILED, error=str(e))
        finally:
            self.state = WorkerState.BACKOFF

        self.processed_count += 1
        self.last_trade_id = trade_id
        self.last_processed_at = datetime.utcnow()
        logger.info(f"[{self.name}] Processed trade {trade_id} for account {account}, profit: {profit:.2f}")
        return CycleResult(outcome=CycleOutcome.PROCESSED, trade_id=trade_id, account=account, profit=profit)

    async def run_loop(self):
        """Cycle until stopped, sleeping for the poll interval after every cycle."""
        logger.info(f"[{self.name}] Worker started with polling interval: {self.poll_interval_seconds}s")

        while self.running:
            try:
                await self.run_cycle()
            except Exception as e:
                self.failed_cycles += 1
                self.last_error = str(e)
                logger.error(f"[{self.name}] Unexpected error in worker loop: {e}", exc_info=True)

            self.state = WorkerState.BACKOFF
            await asyncio.sleep(self.poll_interval_seconds)
            self.state = WorkerState.IDLE

        self.state = WorkerState.STOPPED
        logger.info(f"[{self.name}] Worker loop exited")

    async def drain(self, max_cycles: int = 10000) -> int:
        """
        Process until the queue reports empty, then return the number of trades
        processed. Backs `tradeq-worker --drain` for one-shot backlog runs.
        """
        processed = 0
        for _ in range(max_cycles):
            result = await self.run_cycle()
            if result.outcome == CycleOutcome.EMPTY:
                break
            if result.outcome == CycleOutcome.PROCESSED:
                processed += 1
        self.state = WorkerState.IDLE
        return processed

    async def start(self):
        """Start the background loop."""
        if self.running:
            logger.warning(f"[{self.name}] Worker already running, ignoring duplicate start() call")
            return

        self.running = True  # Set before creating the task to prevent double-start
        self.state = WorkerState.IDLE
        self.task = asyncio.create_task(self.run_loop())

    async def stop(self):
        """Stop the loop; an in-flight transaction is committed or rolled back, never left partial."""
        self.running = False
        if self.task:
            self.task.cancel()
            try:
                await self.task
            except asyncio.CancelledError:
                pass
            self.task = None
        self.state = WorkerState.STOPPED
        logger.info(f"[{self.name}] Worker stopped")

    def get_status(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "running": self.running,
            "state": self.state.value,
            "poll_interval_seconds": self.poll_interval_seconds,
            "skip_locked": self.skip_locked,
            "processed_count": self.processed_count,
            "empty_polls": self.empty_polls,
            "failed_cycles": self.failed_cycles,
            "last_trade_id": self.last_trade_id,
            "last_processed_at": self.last_processed_at.isoformat() if self.last_processed_at else None,
            "last_error": self.last_error,
        }
