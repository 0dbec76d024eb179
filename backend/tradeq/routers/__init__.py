"""
API Routers
"""

from tradeq.routers import system_router
from tradeq.routers import trades_router

__all__ = [
    "system_router",
    "trades_router",
]
