from __future__ import annotations

from types import SimpleNamespace

import pytest
from eth_account import Account
from web3 import Web3

from tradeai.exceptions import UpstreamError, ValidationError
from tradeai.models.config import NetworkConfig, NetworksConfig, TradeAIConfig, TradingConfig
from tradeai.services.web3_service import Web3Service

PRIVATE_KEY = "0x4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"
SENDER = Account.from_key(PRIVATE_KEY).address
RECIPIENT = "0x" + "12" * 20


class FakeEth:
    def __init__(self, base_fee=None, balance=0):
        self.base_fee = base_fee
        self.balance = balance
        self.gas_price = 20 * 10**9
        self.max_priority_fee = 2 * 10**9
        self.chain_id = 1
        self.account = Account()
        self.raw_sent = []
        self.balance_queries = []

    def get_block(self, which):
        block = {"number": 1}
        if self.base_fee is not None:
            block["baseFeePerGas"] = self.base_fee
        return block

    def get_balance(self, address):
        self.balance_queries.append(address)
        return self.balance

    def get_transaction_count(self, address):
        return 7

    def send_raw_transaction(self, raw):
        self.raw_sent.append(raw)
        return b"\x11" * 32


def _service(eth, **kwargs):
    kwargs.setdefault("private_key", PRIVATE_KEY)
    return Web3Service(rpc_urls=["http://rpc.test"], w3=SimpleNamespace(eth=eth), **kwargs)


def test_wei_balance_defaults_to_wallet_address():
    eth = FakeEth(balance=5 * 10**17)

    assert _service(eth).wei_balance() == 5 * 10**17
    assert eth.balance_queries == [SENDER]


def test_wei_balance_checksums_explicit_address():
    eth = FakeEth()

    _service(eth).wei_balance(RECIPIENT.lower())

    assert eth.balance_queries == [Web3.to_checksum_address(RECIPIENT)]


def test_build_native_transfer_uses_eip1559_fees_when_base_fee_present():
    eth = FakeEth(base_fee=10 * 10**9)

    tx = _service(eth, gas_limit=21000).build_native_transfer(RECIPIENT, 10**17)

    assert tx["from"] == SENDER
    assert tx["to"] == Web3.to_checksum_address(RECIPIENT)
    assert tx["value"] == 10**17
    assert tx["gas"] == 21000
    assert tx["nonce"] == 7
    assert tx["chainId"] == 1
    assert tx["type"] == 2
    assert tx["maxPriorityFeePerGas"] == 2 * 10**9
    assert tx["maxFeePerGas"] == int(10 * 10**9 * 2.0 + 2 * 10**9)
    assert "gasPrice" not in tx


def test_build_native_transfer_uses_gas_price_on_legacy_chains():
    eth = FakeEth(base_fee=None)

    tx = _service(eth, chain_id=56).build_native_transfer(RECIPIENT, 1)

    assert tx["type"] == 0
    assert tx["gasPrice"] == 20 * 10**9
    assert tx["chainId"] == 56
    assert "maxFeePerGas" not in tx


def test_invalid_recipient_is_a_validation_error():
    with pytest.raises(ValidationError):
        _service(FakeEth()).build_native_transfer("not-an-address", 1)


def test_missing_or_bad_key_is_a_validation_error():
    with pytest.raises(ValidationError):
        _service(FakeEth(), private_key="").address
    with pytest.raises(ValidationError):
        _service(FakeEth(), private_key="0x1234").address


def test_sign_and_send_broadcasts_signed_transaction():
    eth = FakeEth(base_fee=10**9)
    service = _service(eth)
    tx = service.build_native_transfer(RECIPIENT, 10**15)

    tx_hash = service.sign_and_send(tx)

    assert tx_hash == "0x" + "11" * 32
    assert len(eth.raw_sent) == 1


def test_dry_run_does_not_broadcast():
    eth = FakeEth(base_fee=10**9)
    service = _service(eth, dry_run=True)

    tx_hash = service.sign_and_send(service.build_native_transfer(RECIPIENT, 1))

    assert tx_hash == "0x" + "0" * 64
    assert eth.raw_sent == []


def test_rpc_failure_becomes_upstream_error():
    eth = FakeEth()

    def boom(address):
        raise ConnectionError("node unreachable")

    eth.get_balance = boom

    with pytest.raises(UpstreamError):
        _service(eth).wei_balance()


def test_rpc_failure_retries_after_rotating(monkeypatch):
    calls = []
    good = FakeEth(balance=42)
    bad = FakeEth()

    def boom(address):
        calls.append("bad")
        raise ConnectionError("node unreachable")

    bad.get_balance = boom
    service = Web3Service(
        rpc_urls=["http://a.test", "http://b.test"],
        private_key=PRIVATE_KEY,
        retries=2,
        retry_backoff_secs=0,
        w3=SimpleNamespace(eth=bad),
    )
    monkeypatch.setattr(service, "_connect", lambda url: SimpleNamespace(eth=good))

    assert service.wei_balance() == 42
    assert calls == ["bad"]


def test_no_rpc_url_is_an_upstream_error():
    service = Web3Service(rpc_urls=[], private_key=PRIVATE_KEY)

    with pytest.raises(UpstreamError):
        service.wei_balance()


def test_from_config_splits_failover_urls():
    config = TradeAIConfig(
        networks=NetworksConfig(ethereum=NetworkConfig(rpc_url="http://a.test, http://b.test/", chain_id=5)),
        private_key=PRIVATE_KEY,
    )

    service = Web3Service.from_config(config)

    assert service._rpc_urls == ["http://a.test", "http://b.test"]
    assert service._chain_id == 5
    assert service.address == SENDER


def test_unit_conversions():
    assert Web3Service.ether_to_wei("0.1") == 10**17
    assert str(Web3Service.wei_to_ether(15 * 10**17)) == "1.5"


def test_gas_settings_come_from_config():
    config = TradeAIConfig(
        networks=NetworksConfig(ethereum=NetworkConfig(rpc_url="http://a.test", chain_id=1)),
        trading=TradingConfig(gas_mode="legacy", gas_price_wei=7 * 10**9),
        private_key=PRIVATE_KEY,
    )
    service = Web3Service.from_config(config)
    service._w3 = SimpleNamespace(eth=FakeEth(base_fee=10**9))

    tx = service.build_native_transfer(RECIPIENT, 1)

    assert tx["type"] == 0
    assert tx["gasPrice"] == 7 * 10**9


def test_fee_multiplier_and_priority_fallback_are_configurable():
    eth = FakeEth(base_fee=10 * 10**9)
    del eth.max_priority_fee

    tx = _service(eth, max_fee_multiplier=3.0, priority_fee_gwei=1.0).build_native_transfer(RECIPIENT, 1)

    assert tx["maxPriorityFeePerGas"] == 10**9
    assert tx["maxFeePerGas"] == 31 * 10**9


def test_unknown_gas_mode_is_rejected():
    with pytest.raises(ValidationError):
        _service(FakeEth(), gas_mode="turbo")


def test_ether_amount_below_one_wei_is_rejected():
    with pytest.raises(ValidationError):
        Web3Service.ether_to_wei("0.0000000000000000001")
