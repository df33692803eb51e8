"""
Typed configuration of the plugin.

Values are filled from the environment by ``tradeai.utils.config.load_settings``;
the defaults below are the static fallbacks used when nothing is set.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class NetworkConfig(BaseModel):
    rpc_url: str = ""
    chain_id: Optional[int] = None

    @property
    def rpc_urls(self) -> List[str]:
        """Comma-separated ``rpc_url`` split into a failover list."""
        return [u.strip().rstrip("/") for u in self.rpc_url.split(",") if u.strip()]


class NetworksConfig(BaseModel):
    ethereum: NetworkConfig = Field(default_factory=lambda: NetworkConfig(chain_id=1))
    solana: NetworkConfig = Field(default_factory=NetworkConfig)


class TradingConfig(BaseModel):
    max_slippage: float = 0.5
    gas_limit: int = 300000
    timeout: int = 30000  # ms
    gas_mode: str = "auto"  # auto | legacy | 1559
    gas_price_wei: int = 0  # fuerza gasPrice si > 0
    priority_fee_gwei: float = 1.5
    max_fee_multiplier: float = 2.0

    @property
    def timeout_secs(self) -> float:
        return self.timeout / 1000.0


class RiskManagementConfig(BaseModel):
    max_position_size: float = 1000
    stop_loss: float = 5  # %
    take_profit: float = 10  # %


class TradeAIConfig(BaseModel):
    networks: NetworksConfig = Field(default_factory=NetworksConfig)
    trading: TradingConfig = Field(default_factory=TradingConfig)
    risk_management: RiskManagementConfig = Field(default_factory=RiskManagementConfig)

    # Secretos y endpoints: nunca se loguean
    private_key: str = Field(default="", repr=False)
    solana_private_key: Optional[str] = Field(default=None, repr=False)
    solana_wallet_address: Optional[str] = None

    coingecko_base_url: str = "https://api.coingecko.com/api/v3"
    binance_ws_url: str = "wss://stream.binance.com:9443/ws"
    dry_run: bool = False
    rpc_retries: int = 1
    rpc_retry_backoff_secs: float = 0.4
