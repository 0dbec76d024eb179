"""
Tests for backend/tradeq/services/profit_calculator.py
"""

import pytest

from tradeq.constants import LOT_SIZE
from tradeq.services.profit_calculator import calculate_profit


class TestCalculateProfit:
    """Tests for calculate_profit()."""

    def test_buy_profit(self):
        """Happy path: a buy that closes higher is a gain."""
        assert calculate_profit(1.0, 1.1000, 1.1050, "buy") == pytest.approx(500.0)

    def test_sell_is_negated(self):
        """The same price move on a sell is a loss of the same size."""
        assert calculate_profit(1.0, 1.1000, 1.1050, "sell") == pytest.approx(-500.0)

    def test_buy_loss(self):
        assert calculate_profit(2.0, 1.2000, 1.1900, "buy") == pytest.approx(-2000.0)

    def test_sell_gain_when_price_falls(self):
        assert calculate_profit(0.5, 1.3000, 1.2900, "sell") == pytest.approx(500.0)

    def test_flat_trade_is_zero(self):
        assert calculate_profit(3.0, 1.25, 1.25, "buy") == 0.0

    def test_scales_with_volume_and_lot_size(self):
        result = calculate_profit(0.1, 100.0, 101.0, "buy")
        assert result == pytest.approx(1.0 * 0.1 * LOT_SIZE)
