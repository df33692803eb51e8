from __future__ import annotations

import os

os.environ.setdefault("LOG_TO_FILE", "false")
os.environ.setdefault("LOG_LEVEL", "DEBUG")

from typing import Dict, List, Optional

import pytest
import requests

from tradeai.exceptions import UpstreamError
from tradeai.models.config import TradeAIConfig
from tradeai.models.market_data import MarketData


class FakeMarketData:
    """Price index stand-in: fixed price and 24h change per token."""

    def __init__(self, prices: Optional[Dict[str, str]] = None, changes: Optional[Dict[str, str]] = None) -> None:
        self.prices = prices or {}
        self.changes = changes or {}
        self.calls: List[str] = []
        self.fail = False

    def get_market_data(self, token: str) -> MarketData:
        self.calls.append(token)
        if self.fail:
            raise UpstreamError(f"price index down for {token}")
        return MarketData(
            token=token,
            price=self.prices.get(token, "1"),
            volume_24h="1000",
            change_24h=self.changes.get(token, "2.5"),
            timestamp=0,
        )


class FakeEthereum:
    def __init__(self, balance_wei: int = 0) -> None:
        self.balance_wei = balance_wei
        self.built: List[dict] = []
        self.sent: List[dict] = []

    def wei_balance(self, address: Optional[str] = None) -> int:
        return self.balance_wei

    def build_native_transfer(self, to: str, amount_wei: int) -> dict:
        tx = {"to": to, "value": amount_wei}
        self.built.append(tx)
        return tx

    def sign_and_send(self, tx: dict) -> str:
        self.sent.append(tx)
        return "0x" + "ab" * 32


class FakeSolana:
    def __init__(self, lamports: int = 0) -> None:
        self.lamports = lamports
        self.built: List[tuple] = []

    def lamports_balance(self, address: Optional[str] = None) -> int:
        return self.lamports

    def build_native_transfer(self, to: str, lamports: int) -> tuple:
        tx = (to, lamports)
        self.built.append(tx)
        return tx

    def send_transaction(self, tx: tuple) -> str:
        return "5igSignature"


class FakeResponse:
    def __init__(self, payload, status_code: int = 200) -> None:
        self._payload = payload
        self.status_code = status_code

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        return self._payload


@pytest.fixture
def config() -> TradeAIConfig:
    return TradeAIConfig()


@pytest.fixture
def market_data() -> FakeMarketData:
    return FakeMarketData(prices={"ethereum": "2000", "solana": "100"})
