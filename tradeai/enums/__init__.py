from tradeai.enums.network import Network
from tradeai.enums.trade import TradeSide, TradeStatus
from tradeai.enums.status import FeedState, StrategyStatus, SupportStatus

__all__ = [
    "Network",
    "TradeSide",
    "TradeStatus",
    "FeedState",
    "StrategyStatus",
    "SupportStatus",
]
