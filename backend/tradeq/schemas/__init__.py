"""Centralized Pydantic schemas for API requests/responses"""

from .trade import AccountStatsResponse, TradeRequest

__all__ = [
    "TradeRequest",
    "AccountStatsResponse",
]
