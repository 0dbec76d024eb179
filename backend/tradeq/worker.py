"""
Standalone trade worker entrypoint.

Opens the database (fatal if it cannot be reached), then drains the trade
queue into account stats until interrupted.

Usage:
    tradeq-worker [--db PATH] [--poll SECONDS] [--name NAME] [--drain]

With --drain the worker processes the current backlog once and exits
instead of polling forever.
"""

import argparse
import asyncio
import logging
import sys

from sqlalchemy.exc import SQLAlchemyError

from tradeq.config import database_url_from_path, settings
from tradeq.logging_setup import setup_logging

logger = logging.getLogger(__name__)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Fold queued trades into account stats")
    parser.add_argument("--db", default=None, help="path to SQLite database (or a SQLAlchemy URL)")
    parser.add_argument("--poll", type=float, default=None, help="polling interval in seconds")
    parser.add_argument("--name", default="worker", help="worker name used in log lines")
    parser.add_argument("--drain", action="store_true", help="process the current backlog, then exit")
    return parser.parse_args(argv)


async def run_worker(poll_interval_seconds: float, name: str, drain: bool = False) -> None:
    from tradeq import database
    from tradeq.services.trade_worker import TradeWorker

    # Startup failures are fatal: nothing is processed against a database we cannot open
    await database.init_db()
    async with database.async_session_maker() as db:
        await database.ping_db(db)

    worker = TradeWorker(poll_interval_seconds=poll_interval_seconds, name=name)
    try:
        if drain:
            processed = await worker.drain()
            logger.info(f"[{name}] Backlog drained: {processed} trade(s) processed")
        else:
            worker.running = True
            await worker.run_loop()
    finally:
        worker.running = False
        await database.engine.dispose()


def main(argv=None) -> int:
    args = parse_args(argv)
    setup_logging(settings.log_level)

    if args.db:
        from tradeq.database import configure_database

        configure_database(database_url_from_path(args.db))

    poll = settings.poll_interval_seconds if args.poll is None else args.poll
    if poll < 0:
        logger.critical("Polling interval must not be negative")
        return 2

    try:
        asyncio.run(run_worker(poll, args.name, drain=args.drain))
    except KeyboardInterrupt:
        logger.info("Worker interrupted, exiting")
    except (SQLAlchemyError, OSError) as e:
        logger.critical(f"Failed to open database: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
