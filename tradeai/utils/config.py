"""
Configuration loading for tradeai.

Settings come from the environment (a ``.env`` file is loaded first if one is
found) and may be overridden by a ``config.yaml`` in the working directory. The
YAML mirrors the structure of ``TradeAIConfig``::

    trading:
      gas_limit: 250000
    risk_management:
      max_position_size: 50
"""

from __future__ import annotations

import os
from typing import Any, Dict, Optional

import yaml  # type: ignore
from dotenv import find_dotenv, load_dotenv

from tradeai.models.config import TradeAIConfig


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """Load overrides from ``config.yaml``.

    :param path: explicit file path; defaults to ``TRADEAI_CONFIG`` or
        ``./config.yaml``.
    :returns: A dictionary representing the configuration. Missing files
        quietly yield an empty dictionary.
    """
    config_path = path or os.getenv("TRADEAI_CONFIG") or os.path.join(os.getcwd(), "config.yaml")
    if os.path.exists(config_path):
        with open(config_path, "r", encoding="utf-8") as f:
            return yaml.safe_load(f) or {}
    return {}


def _deep_merge(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _env_settings() -> Dict[str, Any]:
    env = os.environ
    return {
        "networks": {
            "ethereum": {
                "rpc_url": env.get("ETHEREUM_RPC_URL", ""),
                "chain_id": int(env.get("ETHEREUM_CHAIN_ID", "1")),
            },
            "solana": {
                "rpc_url": env.get("SOLANA_RPC_URL", ""),
            },
        },
        "trading": {
            "max_slippage": float(env.get("MAX_SLIPPAGE", "0.5")),
            "gas_limit": int(env.get("GAS_LIMIT", "300000")),
            "timeout": int(env.get("TRADING_TIMEOUT_MS", "30000")),
            "gas_mode": env.get("GAS_MODE", "auto").lower(),
            "gas_price_wei": int(env.get("GAS_PRICE_WEI", "0")),
            "priority_fee_gwei": float(env.get("PRIORITY_FEE_GWEI", "1.5")),
            "max_fee_multiplier": float(env.get("MAX_FEE_MULTIPLIER", "2.0")),
        },
        "risk_management": {
            "max_position_size": float(env.get("MAX_POSITION_SIZE", "1000")),
            "stop_loss": float(env.get("STOP_LOSS_PCT", "5")),
            "take_profit": float(env.get("TAKE_PROFIT_PCT", "10")),
        },
        "private_key": env.get("TRADING_PRIVATE_KEY", ""),
        "solana_private_key": env.get("SOLANA_PRIVATE_KEY") or None,
        "solana_wallet_address": env.get("SOLANA_WALLET_ADDRESS") or None,
        "coingecko_base_url": env.get("COINGECKO_BASE_URL", "https://api.coingecko.com/api/v3").rstrip("/"),
        "binance_ws_url": env.get("BINANCE_WS_URL", "wss://stream.binance.com:9443/ws").rstrip("/"),
        "dry_run": env.get("DRY_RUN", "false").lower() == "true",
        "rpc_retries": int(env.get("RPC_RETRIES", "1")),
        "rpc_retry_backoff_secs": float(env.get("RPC_RETRY_BACKOFF_SECS", "0.4")),
    }


def load_settings(config_path: Optional[str] = None, use_dotenv: bool = True) -> TradeAIConfig:
    """Build the plugin configuration from ``.env``, the environment and YAML."""
    if use_dotenv:
        load_dotenv(find_dotenv(usecwd=True), override=False)
    data = _deep_merge(_env_settings(), load_config(config_path))
    return TradeAIConfig.model_validate(data)
