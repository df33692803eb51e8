"""
In-memory store of stop-loss and take-profit thresholds.

One threshold of each kind per token; the last write wins and nothing expires.
"""

from __future__ import annotations

import threading
from typing import Dict, Optional

from tradeai.models.risk import RiskThreshold


class ThresholdRepository:
    """Repository for per-token risk thresholds."""

    def __init__(self) -> None:
        self._stop_losses: Dict[str, RiskThreshold] = {}
        self._take_profits: Dict[str, RiskThreshold] = {}
        self._lock = threading.Lock()

    def set_stop_loss(self, token: str, threshold: RiskThreshold) -> None:
        with self._lock:
            self._stop_losses[token] = threshold

    def set_take_profit(self, token: str, threshold: RiskThreshold) -> None:
        with self._lock:
            self._take_profits[token] = threshold

    def get_stop_loss(self, token: str) -> Optional[RiskThreshold]:
        with self._lock:
            return self._stop_losses.get(token)

    def get_take_profit(self, token: str) -> Optional[RiskThreshold]:
        with self._lock:
            return self._take_profits.get(token)

    def clear(self, token: str) -> None:
        with self._lock:
            self._stop_losses.pop(token, None)
            self._take_profits.pop(token, None)
