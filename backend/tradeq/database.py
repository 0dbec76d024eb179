"""
Database engine and session management.

SQLite has no row-level locks. Transactions started through
begin_write_transaction() are opened with BEGIN IMMEDIATE: the write lock is
taken before the claim query runs and a competing worker waits (up to the
busy timeout) until the holder finishes. All other transactions use a plain
deferred BEGIN, and WAL journaling lets them read while a writer is active.
"""

import logging

from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from tradeq.config import settings

logger = logging.getLogger(__name__)


# Execution option asking the SQLite begin hook for BEGIN IMMEDIATE
IMMEDIATE_OPTION = "sqlite_begin_immediate"


class Base(DeclarativeBase):
    pass


def _install_sqlite_hooks(engine: AsyncEngine, busy_timeout_ms: int) -> None:
    @event.listens_for(engine.sync_engine, "connect")
    def on_connect(dbapi_connection, connection_record):
        # Let SQLAlchemy emit BEGIN itself instead of the driver's deferred BEGIN
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute(f"PRAGMA busy_timeout = {int(busy_timeout_ms)}")
        # Readers see the last committed state instead of waiting on a writer
        cursor.execute("PRAGMA journal_mode = WAL")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def on_begin(conn):
        if conn.get_execution_options().get(IMMEDIATE_OPTION):
            conn.exec_driver_sql("BEGIN IMMEDIATE")
        else:
            conn.exec_driver_sql("BEGIN")


def build_engine(database_url: str, echo: bool = False, busy_timeout_ms: int = None) -> AsyncEngine:
    """Create an async engine; SQLite URLs get the locking hooks installed."""
    is_sqlite = database_url.startswith("sqlite")
    engine = create_async_engine(
        database_url,
        echo=echo,
        connect_args={"check_same_thread": False} if is_sqlite else {},
        pool_pre_ping=True,
        pool_recycle=3600,
    )
    if is_sqlite:
        if busy_timeout_ms is None:
            busy_timeout_ms = settings.sqlite_busy_timeout_ms
        _install_sqlite_hooks(engine, busy_timeout_ms)
    return engine


def build_session_maker(bind: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(bind, class_=AsyncSession, expire_on_commit=False, autoflush=False)


engine = build_engine(settings.database_url, echo=settings.sql_echo)
async_session_maker = build_session_maker(engine)


def configure_database(database_url: str) -> None:
    """Rebind the module-level engine and session factory (used by the --db flag)."""
    global engine, async_session_maker
    settings.database_url = database_url
    engine = build_engine(database_url, echo=settings.sql_echo)
    async_session_maker = build_session_maker(engine)
    logger.info(f"Database configured: {database_url}")


async def get_db():
    async with async_session_maker() as session:
        yield session


async def init_db(bind: AsyncEngine = None):
    # Import models so their tables are registered on Base.metadata
    from tradeq import models  # noqa: F401

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def ping_db(session: AsyncSession) -> None:
    await session.execute(text("SELECT 1"))


async def begin_write_transaction(session: AsyncSession) -> None:
    """
    Open the session's transaction holding the write lock from the start.

    Must be the first thing done with the session. On SQLite this issues
    BEGIN IMMEDIATE; other engines ignore the option and rely on row locks.
    """
    await session.connection(execution_options={IMMEDIATE_OPTION: True})
