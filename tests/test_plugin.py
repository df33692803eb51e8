from __future__ import annotations

from typing import Any, List

import pytest

from tradeai import __version__
from tradeai.enums import Network, StrategyStatus
from tradeai.exceptions import ValidationError
from tradeai.plugin import Action, TradeAIPlugin, build_plugin
from tradeai.services.portfolio_service import PortfolioService
from tradeai.services.risk_management_service import RiskManagementService
from tradeai.services.trading_service import TradingService

from tests.conftest import FakeEthereum, FakeSolana

ACTION_NAMES = ["executeTrade", "getMarketData", "getPortfolio", "setTradingStrategy", "monitorMarket"]


class FakeRuntime:
    def __init__(self) -> None:
        self.actions: List[Action] = []
        self.services: List[Any] = []

    def register_action(self, action: Action) -> None:
        self.actions.append(action)

    def register_service(self, service: Any) -> None:
        self.services.append(service)


class RecordingMarketData:
    def __init__(self, inner) -> None:
        self.inner = inner
        self.monitored: List[str] = []
        self.closed = False

    def get_market_data(self, token):
        return self.inner.get_market_data(token)

    def monitor_market(self, tokens):
        self.monitored.extend(tokens)

    def close(self):
        self.closed = True


@pytest.fixture
def plugin(config, market_data):
    feed = RecordingMarketData(market_data)
    portfolio = PortfolioService(config, feed, ethereum=FakeEthereum(10**18), solana=FakeSolana(10**9))
    return TradeAIPlugin(
        config=config,
        trading=TradingService(config, ethereum=FakeEthereum(), solana=FakeSolana()),
        market_data=feed,
        portfolio=portfolio,
        risk=RiskManagementService(config, feed, portfolio),
    )


def test_plugin_metadata(plugin):
    assert plugin.name == "tradeai"
    assert plugin.version == __version__
    assert [a.name for a in plugin.actions] == ACTION_NAMES
    assert all(a.description for a in plugin.actions)


def test_register_exposes_actions_and_services(plugin):
    runtime = FakeRuntime()

    plugin.register(runtime)

    assert [a.name for a in runtime.actions] == ACTION_NAMES
    assert runtime.services == [plugin.trading, plugin.market_data, plugin.portfolio, plugin.risk]


def test_execute_trade_action(plugin):
    trade = plugin.invoke(
        "executeTrade",
        {"network": "solana", "type": "buy", "token": "Recipient111", "amount": "0.5", "price": "100"},
    )

    assert trade.network is Network.SOLANA
    assert trade.tx_hash == "5igSignature"


def test_market_data_action(plugin):
    data = plugin.invoke("getMarketData", {"token": "ethereum"})

    assert data.price == "2000"


def test_portfolio_action(plugin):
    portfolio = plugin.invoke("getPortfolio", {"network": "ethereum"})

    assert float(portfolio.total_value) == 2000.0


def test_set_trading_strategy_action_returns_nothing(plugin):
    result = plugin.invoke("setTradingStrategy", {"id": "s1", "name": "Grid", "parameters": {}})

    assert result is None
    assert plugin.trading.get_trading_strategy("s1").name == "Grid"
    assert plugin.trading.set_trading_strategy(
        {"id": "s1", "name": "Grid", "parameters": {}}
    ) is StrategyStatus.STORED


def test_monitor_market_action(plugin):
    assert plugin.invoke("monitorMarket", {"tokens": ["BTC", "ETH"]}) is None
    assert plugin.market_data.monitored == ["BTC", "ETH"]


@pytest.mark.parametrize(
    "name, params",
    [
        ("getMarketData", {}),
        ("getPortfolio", {"network": ""}),
        ("monitorMarket", {"tokens": "BTC"}),
        ("monitorMarket", None),
        ("doSomething", {}),
    ],
)
def test_invalid_invocations_raise_validation_error(plugin, name, params):
    with pytest.raises(ValidationError):
        plugin.invoke(name, params)


def test_close_stops_market_feeds(plugin):
    plugin.close()

    assert plugin.market_data.closed


def test_build_plugin_shares_one_market_data_service(config):
    plugin = build_plugin(config)
    try:
        assert plugin.portfolio.market_data is plugin.market_data
        assert plugin.risk.market_data is plugin.market_data
        assert plugin.risk.portfolio is plugin.portfolio
        assert plugin.market_data.base_url == config.coingecko_base_url
    finally:
        plugin.close()
