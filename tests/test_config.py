from __future__ import annotations

import pytest

from tradeai.utils.config import load_settings

ENV_VARS = [
    "ETHEREUM_RPC_URL", "ETHEREUM_CHAIN_ID", "SOLANA_RPC_URL", "TRADING_PRIVATE_KEY",
    "SOLANA_PRIVATE_KEY", "SOLANA_WALLET_ADDRESS", "MAX_SLIPPAGE", "GAS_LIMIT",
    "TRADING_TIMEOUT_MS", "MAX_POSITION_SIZE", "STOP_LOSS_PCT", "TAKE_PROFIT_PCT",
    "COINGECKO_BASE_URL", "BINANCE_WS_URL", "DRY_RUN", "RPC_RETRIES", "TRADEAI_CONFIG",
    "GAS_MODE", "GAS_PRICE_WEI", "PRIORITY_FEE_GWEI", "MAX_FEE_MULTIPLIER", "RPC_RETRY_BACKOFF_SECS",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for name in ENV_VARS:
        # setenv + delenv: al terminar se borra también lo que cargue load_dotenv
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)


def test_defaults_without_environment():
    config = load_settings(use_dotenv=False)

    assert config.networks.ethereum.chain_id == 1
    assert config.networks.ethereum.rpc_urls == []
    assert config.trading.gas_limit == 300000
    assert config.trading.timeout_secs == 30.0
    assert config.risk_management.max_position_size == 1000
    assert config.risk_management.stop_loss == 5
    assert config.risk_management.take_profit == 10
    assert config.dry_run is False
    assert config.rpc_retries == 1


def test_environment_overrides_defaults(monkeypatch):
    monkeypatch.setenv("ETHEREUM_RPC_URL", "https://a.test,https://b.test")
    monkeypatch.setenv("SOLANA_RPC_URL", "https://sol.test")
    monkeypatch.setenv("GAS_LIMIT", "21000")
    monkeypatch.setenv("MAX_POSITION_SIZE", "50")
    monkeypatch.setenv("TRADING_TIMEOUT_MS", "5000")
    monkeypatch.setenv("DRY_RUN", "TRUE")
    monkeypatch.setenv("COINGECKO_BASE_URL", "https://prices.test/api/")

    config = load_settings(use_dotenv=False)

    assert config.networks.ethereum.rpc_urls == ["https://a.test", "https://b.test"]
    assert config.networks.solana.rpc_url == "https://sol.test"
    assert config.trading.gas_limit == 21000
    assert config.trading.timeout_secs == 5.0
    assert config.risk_management.max_position_size == 50
    assert config.dry_run is True
    assert config.coingecko_base_url == "https://prices.test/api"


def test_yaml_overrides_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("GAS_LIMIT", "21000")
    monkeypatch.setenv("STOP_LOSS_PCT", "3")
    (tmp_path / "config.yaml").write_text(
        "trading:\n  gas_limit: 250000\nrisk_management:\n  max_position_size: 25\n",
        encoding="utf-8",
    )

    config = load_settings(use_dotenv=False)

    assert config.trading.gas_limit == 250000
    assert config.risk_management.max_position_size == 25
    assert config.risk_management.stop_loss == 3


def test_explicit_config_path(tmp_path):
    path = tmp_path / "custom.yaml"
    path.write_text("dry_run: true\n", encoding="utf-8")

    assert load_settings(config_path=str(path), use_dotenv=False).dry_run is True


def test_private_key_is_not_in_repr(monkeypatch):
    monkeypatch.setenv("TRADING_PRIVATE_KEY", "0xdeadbeef")

    config = load_settings(use_dotenv=False)

    assert config.private_key == "0xdeadbeef"
    assert "deadbeef" not in repr(config)


def test_gas_settings_are_read_from_dotenv(tmp_path):
    (tmp_path / ".env").write_text(
        "GAS_MODE=Legacy\nGAS_PRICE_WEI=5000000000\nPRIORITY_FEE_GWEI=2\nMAX_FEE_MULTIPLIER=1.5\nRPC_RETRY_BACKOFF_SECS=0\n",
        encoding="utf-8",
    )

    config = load_settings()

    assert config.trading.gas_mode == "legacy"
    assert config.trading.gas_price_wei == 5_000_000_000
    assert config.trading.priority_fee_gwei == 2.0
    assert config.trading.max_fee_multiplier == 1.5
    assert config.rpc_retry_backoff_secs == 0.0


def test_gas_defaults():
    trading = load_settings(use_dotenv=False).trading

    assert trading.gas_mode == "auto"
    assert trading.gas_price_wei == 0
    assert trading.priority_fee_gwei == 1.5
    assert trading.max_fee_multiplier == 2.0
