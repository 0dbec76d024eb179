"""
Profit Calculator

Maps a validated trade to its signed profit. Pure function: callers pass
values the ingestion rules have already accepted (positive prices and volume).
"""

from tradeq.constants import LOT_SIZE, SIDE_SELL


def calculate_profit(volume: float, open_price: float, close_price: float, side: str) -> float:
    """
    Profit of one trade: (close - open) * volume * LOT_SIZE, negated for sells.

    Example: volume=1.0, open=1.1000, close=1.1050 -> 500.0 for a buy, -500.0 for a sell.
    """
    profit = (close_price - open_price) * volume * LOT_SIZE
    if side == SIDE_SELL:
        profit = -profit
    return profit
