"""
Application Constants

Trade field rules and the profit multiplier.
"""

import re

# Converts a price delta times volume (in lots) into a monetary profit figure
LOT_SIZE = 100000.0

SIDE_BUY = "buy"
SIDE_SELL = "sell"
VALID_SIDES = (SIDE_BUY, SIDE_SELL)

# Instrument codes are six uppercase ASCII letters, e.g. EURUSD
SYMBOL_PATTERN = re.compile(r"[A-Z]{6}")  # used with fullmatch()
