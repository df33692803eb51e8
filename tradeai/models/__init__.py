from tradeai.models.config import (
    NetworkConfig,
    NetworksConfig,
    RiskManagementConfig,
    TradeAIConfig,
    TradingConfig,
)
from tradeai.models.market_data import MarketData
from tradeai.models.portfolio import Portfolio, TokenHolding
from tradeai.models.risk import RiskLevels, RiskThreshold
from tradeai.models.strategy import TradingStrategy
from tradeai.models.trade import Trade

__all__ = [
    "MarketData",
    "NetworkConfig",
    "NetworksConfig",
    "Portfolio",
    "RiskLevels",
    "RiskManagementConfig",
    "RiskThreshold",
    "TokenHolding",
    "Trade",
    "TradeAIConfig",
    "TradingConfig",
    "TradingStrategy",
]
