"""
Shared test fixtures for trade queue tests.

Provides reusable fixtures for:
- Async database engine on a temporary SQLite file
- Session factory and a per-test session
- Trade request / queue row factories
"""

import pytest

from tradeq.database import Base, build_engine, build_session_maker, init_db
from tradeq.models import QueueItem
from tradeq.schemas import TradeRequest

# ---------------------------------------------------------------------------
# Database fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
async def async_engine(tmp_path):
    """
    Create an async SQLite engine on a temp file.

    A file (not :memory:) is used so several connections, and therefore
    several concurrent workers, see the same database.
    """
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", busy_timeout_ms=10000)
    await init_db(engine)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_maker(async_engine):
    return build_session_maker(async_engine)


@pytest.fixture
async def db_session(session_maker):
    """Provide an async database session; uncommitted work is rolled back after the test."""
    async with session_maker() as session:
        yield session
        await session.rollback()


# ---------------------------------------------------------------------------
# Sample data factories
# ---------------------------------------------------------------------------


@pytest.fixture
def make_trade():
    """Build a valid TradeRequest, overriding any field."""
    def _make_trade(**overrides):
        fields = {
            "account": "acc-1",
            "symbol": "EURUSD",
            "volume": 1.0,
            "open": 1.1000,
            "close": 1.1050,
            "side": "buy",
        }
        fields.update(overrides)
        return TradeRequest(**fields)
    return _make_trade


@pytest.fixture
def add_queue_items(session_maker):
    """Insert queue rows directly (bypassing ingestion) and return their ids."""
    async def _add(*rows):
        items = []
        for row in rows:
            fields = {
                "account": "acc-1",
                "symbol": "EURUSD",
                "volume": 1.0,
                "open": 1.1000,
                "close": 1.1050,
                "side": "buy",
                "processed": False,
            }
            fields.update(row)
            items.append(QueueItem(**fields))
        async with session_maker() as session:
            session.add_all(items)
            await session.commit()
        return [item.id for item in items]
    return _add
