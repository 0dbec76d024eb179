"""
API server entrypoint.

Usage:
    tradeq-server [--db PATH] [--listen PORT] [--worker]
"""

import argparse
import logging
import sys

import uvicorn

from tradeq.config import database_url_from_path, settings
from tradeq.logging_setup import setup_logging

logger = logging.getLogger(__name__)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Trade ingestion and stats HTTP API")
    parser.add_argument("--db", default=None, help="path to SQLite database (or a SQLAlchemy URL)")
    parser.add_argument("--listen", default=None, help="HTTP server listen port")
    parser.add_argument("--worker", action="store_true", help="also run a trade worker in this process")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    setup_logging(settings.log_level)

    if args.db:
        from tradeq.database import configure_database

        configure_database(database_url_from_path(args.db))
    if args.listen:
        # Accept both "8080" and ":8080"
        try:
            settings.port = int(str(args.listen).lstrip(":"))
        except ValueError:
            logger.critical(f"Invalid listen port: {args.listen!r}")
            return 2
    if args.worker:
        settings.run_worker_in_api = True

    from tradeq.main import app

    logger.info(f"Starting server on {settings.host}:{settings.port}")
    try:
        uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())
    except Exception as e:
        logger.critical(f"Server failed: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
