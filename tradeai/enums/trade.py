"""
Enumerations describing a trade: which way it goes and where it stands.
"""

from __future__ import annotations

from enum import Enum


class TradeSide(str, Enum):
    """Direction of a trade or of the position a risk threshold protects."""

    BUY = "buy"
    SELL = "sell"


class TradeStatus(str, Enum):
    """Possible states of a submitted trade."""

    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
