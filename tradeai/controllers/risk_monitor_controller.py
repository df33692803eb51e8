"""
Controller that watches live ticks against the stop-loss / take-profit levels.

It only alerts: a triggered level is logged and sent through Telegram, no trade
is placed.
"""

from __future__ import annotations

import threading
from typing import Dict, Iterable, Optional

from tradeai.models.market_data import MarketData
from tradeai.models.risk import RiskLevels
from tradeai.repositories.subscription_repository import PriceListener
from tradeai.services.market_data_service import MarketDataService
from tradeai.services.risk_management_service import RiskManagementService
from tradeai.services.telegram_service import TelegramService
from tradeai.utils.logger import logger_manager, log_function

logger = logger_manager.setup_logger(__name__)


class RiskMonitorController:
    """Evaluate risk levels on every price tick of the watched tokens."""

    def __init__(
        self,
        market_data: MarketDataService,
        risk: RiskManagementService,
        notifier: Optional[TelegramService] = None,
    ) -> None:
        self.market_data = market_data
        self.risk = risk
        self.notifier = notifier or TelegramService()
        self._listeners: Dict[str, PriceListener] = {}
        self._last: Dict[str, RiskLevels] = {}
        self._lock = threading.Lock()

    @log_function
    def watch(self, tokens: Iterable[str]) -> None:
        tokens = list(tokens)
        with self._lock:
            for token in tokens:
                if token in self._listeners:
                    continue
                listener = self._make_listener(token)
                self._listeners[token] = listener
                self.market_data.subscribe_to_price_updates(token, listener)
        self.market_data.monitor_market(tokens)

    @log_function
    def unwatch(self, token: str) -> None:
        with self._lock:
            listener = self._listeners.pop(token, None)
            self._last.pop(token, None)
        if listener:
            self.market_data.unsubscribe_from_price_updates(token, listener)

    def _make_listener(self, token: str) -> PriceListener:
        def _on_tick(data: MarketData) -> None:
            self.on_tick(token, data)
        return _on_tick

    def on_tick(self, token: str, data: MarketData) -> RiskLevels:
        levels = self.risk.check_risk_levels(token, float(data.price))
        with self._lock:
            previous = self._last.get(token)
            self._last[token] = levels
        # solo se avisa en la transición a disparado
        if levels.triggered and levels != previous:
            logger.warning(
                f"⚠️ [{token}] precio={data.price} stop_loss={levels.stop_loss_triggered} "
                f"take_profit={levels.take_profit_triggered}"
            )
            self.notifier.notificar_riesgo(data, levels)
        return levels
