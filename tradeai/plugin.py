"""
Plugin facade exposed to the agent host.

``build_plugin`` wires one instance of each service (the market data service is
shared, so every component sees the same feeds and listeners) and declares the
five actions the host can invoke by name.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Protocol

from tradeai import __version__
from tradeai.exceptions import ValidationError
from tradeai.models.config import TradeAIConfig
from tradeai.models.market_data import MarketData
from tradeai.models.portfolio import Portfolio
from tradeai.models.trade import Trade
from tradeai.services.market_data_service import MarketDataService
from tradeai.services.portfolio_service import PortfolioService
from tradeai.services.risk_management_service import RiskManagementService
from tradeai.services.trading_service import TradingService
from tradeai.utils.config import load_settings
from tradeai.utils.logger import logger_manager

logger = logger_manager.setup_logger(__name__)

ActionHandler = Callable[[Mapping[str, Any]], Any]


@dataclass(frozen=True)
class Action:
    name: str
    description: str
    handler: ActionHandler


class AgentRuntime(Protocol):
    """What the plugin needs from the hosting agent runtime."""

    def register_action(self, action: Action) -> None: ...

    def register_service(self, service: Any) -> None: ...


def _require(params: Mapping[str, Any], key: str) -> Any:
    if not params or params.get(key) in (None, ""):
        raise ValidationError(f"Missing action parameter: {key}")
    return params[key]


@dataclass
class TradeAIPlugin:
    config: TradeAIConfig
    trading: TradingService
    market_data: MarketDataService
    portfolio: PortfolioService
    risk: RiskManagementService
    name: str = "tradeai"
    version: str = __version__
    description: str = "Plugin that lets AI agents perform on-chain trading operations"
    actions: List[Action] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.actions:
            self.actions = [
                Action("executeTrade", "Execute a trade on the specified network", self._execute_trade),
                Action("getMarketData", "Fetch real-time market data", self._get_market_data),
                Action("getPortfolio", "Get current portfolio status", self._get_portfolio),
                Action("setTradingStrategy", "Configure trading strategy parameters", self._set_trading_strategy),
                Action("monitorMarket", "Set up market monitoring and alerts", self._monitor_market),
            ]

    @property
    def services(self) -> List[Any]:
        return [self.trading, self.market_data, self.portfolio, self.risk]

    def register(self, runtime: AgentRuntime) -> None:
        for action in self.actions:
            runtime.register_action(action)
        for service in self.services:
            runtime.register_service(service)
        logger.info(f"Plugin {self.name} v{self.version} registrado con {len(self.actions)} acciones")

    def get_action(self, name: str) -> Action:
        for action in self.actions:
            if action.name == name:
                return action
        raise ValidationError(f"Unknown action: {name}")

    def invoke(self, name: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        return self.get_action(name).handler(params or {})

    def close(self) -> None:
        self.market_data.close()

    # ---------- handlers ----------
    def _execute_trade(self, params: Mapping[str, Any]) -> Trade:
        return self.trading.execute_trade(params)

    def _get_market_data(self, params: Mapping[str, Any]) -> MarketData:
        return self.market_data.get_market_data(_require(params, "token"))

    def _get_portfolio(self, params: Mapping[str, Any]) -> Portfolio:
        return self.portfolio.get_portfolio(_require(params, "network"))

    def _set_trading_strategy(self, params: Mapping[str, Any]) -> None:
        self.trading.set_trading_strategy(params)

    def _monitor_market(self, params: Mapping[str, Any]) -> None:
        tokens = _require(params, "tokens")
        if isinstance(tokens, str):
            raise ValidationError("tokens must be a list of symbols")
        self.market_data.monitor_market(list(tokens))


def build_plugin(config: Optional[TradeAIConfig] = None) -> TradeAIPlugin:
    config = config or load_settings()
    market_data = MarketDataService(
        base_url=config.coingecko_base_url,
        ws_url=config.binance_ws_url,
        timeout=config.trading.timeout_secs,
    )
    portfolio = PortfolioService(config, market_data)
    return TradeAIPlugin(
        config=config,
        trading=TradingService(config),
        market_data=market_data,
        portfolio=portfolio,
        risk=RiskManagementService(config, market_data, portfolio),
    )
