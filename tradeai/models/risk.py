"""
Risk thresholds and the result of checking a price against them.
"""

from __future__ import annotations

from pydantic import BaseModel

from tradeai.enums import TradeSide


class RiskThreshold(BaseModel):
    price: float
    side: TradeSide


class RiskLevels(BaseModel):
    stop_loss_triggered: bool = False
    take_profit_triggered: bool = False

    @property
    def triggered(self) -> bool:
        return self.stop_loss_triggered or self.take_profit_triggered
