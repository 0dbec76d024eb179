"""
Database Models

- QueueItem: one submitted trade waiting to be folded into account stats
- AccountStats: running per-account trade count and cumulative profit
"""

from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Float, Index, Integer, String

from tradeq.database import Base


class QueueItem(Base):
    """
    A trade record on the durable queue.

    Rows are immutable apart from the processed flag, which flips to True
    exactly once, in the same transaction that updates AccountStats.
    """
    __tablename__ = "trades_q"

    id = Column(Integer, primary_key=True, autoincrement=True)
    account = Column(String, nullable=False, index=True)
    symbol = Column(String(6), nullable=False)
    volume = Column(Float, nullable=False)
    open = Column(Float, nullable=False)
    close = Column(Float, nullable=False)
    side = Column(String, nullable=False)  # "buy" or "sell"
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    processed = Column(Boolean, nullable=False, default=False)

    __table_args__ = (
        # Claim order: oldest unprocessed first
        Index("ix_trades_q_pending", "processed", "created_at", "id"),
        # Never reuse ids on SQLite
        {"sqlite_autoincrement": True},
    )

    def __repr__(self) -> str:
        return (
            f"<QueueItem id={self.id} account={self.account} symbol={self.symbol} "
            f"side={self.side} processed={self.processed}>"
        )


class AccountStats(Base):
    """Aggregate of every processed trade for one account, created on its first trade."""
    __tablename__ = "account_stats"

    account = Column(String, primary_key=True)
    trades = Column(Integer, nullable=False, default=0)
    profit = Column(Float, nullable=False, default=0.0)
