"""
In-memory store of trading strategies keyed by id. Resubmitting an id
overwrites the previous strategy; nothing is persisted.
"""

from __future__ import annotations

import threading
from typing import Dict, List, Optional

from tradeai.models.strategy import TradingStrategy


class StrategyRepository:
    def __init__(self) -> None:
        self._strategies: Dict[str, TradingStrategy] = {}
        self._lock = threading.Lock()

    def save(self, strategy: TradingStrategy) -> None:
        with self._lock:
            self._strategies[strategy.id] = strategy

    def get(self, strategy_id: str) -> Optional[TradingStrategy]:
        with self._lock:
            return self._strategies.get(strategy_id)

    def list_all(self) -> List[TradingStrategy]:
        with self._lock:
            return list(self._strategies.values())
