# services/web3_service.py
from __future__ import annotations
from decimal import Decimal
from typing import Any, Callable, List, Optional
from time import sleep

from web3 import Web3
from eth_account import Account
from eth_account.signers.local import LocalAccount

from tradeai.exceptions import UpstreamError, ValidationError
from tradeai.models.config import TradeAIConfig
from tradeai.utils.logger import logger_manager, log_function
from tradeai.utils.units import ETH_DECIMALS, to_base_units

logger = logger_manager.setup_logger(__name__)

GAS_MODES = ("auto", "legacy", "1559")


class Web3Service:
    """
    Cliente JSON-RPC de Ethereum para la wallet de trading.

    El proveedor se crea al primer uso; ``rpc_urls`` admite varios endpoints y
    se rota al siguiente si uno falla.
    """

    def __init__(
        self,
        rpc_urls: List[str],
        private_key: str = "",
        chain_id: Optional[int] = None,
        gas_limit: int = 300000,
        timeout: float = 30.0,
        retries: int = 1,
        dry_run: bool = False,
        gas_mode: str = "auto",
        gas_price_wei: int = 0,
        priority_fee_gwei: float = 1.5,
        max_fee_multiplier: float = 2.0,
        retry_backoff_secs: float = 0.4,
        w3: Optional[Web3] = None,
    ) -> None:
        if gas_mode.lower() not in GAS_MODES:
            raise ValidationError(f"Invalid gas mode: {gas_mode!r} (auto | legacy | 1559)")
        self._rpc_urls = [u for u in rpc_urls if u]
        self._chain_id = chain_id
        self._gas_limit = gas_limit
        self._timeout = timeout
        self._retries = max(1, retries)
        self._dry_run = dry_run
        self._secret = private_key
        self._account: Optional[LocalAccount] = None
        self._current_rpc_idx = 0
        self._w3: Optional[Web3] = w3
        self._gas_mode_setting = gas_mode.lower()
        self._gas_price_override = gas_price_wei  # fuerza gasPrice si > 0
        self._priority_fee_gwei = priority_fee_gwei
        self._max_fee_multiplier = max_fee_multiplier  # maxFee ~= baseFee*mult + priority
        self._retry_backoff = retry_backoff_secs
        self._gas_mode: Optional[str] = None

    @classmethod
    def from_config(cls, config: TradeAIConfig) -> "Web3Service":
        network = config.networks.ethereum
        return cls(
            rpc_urls=network.rpc_urls,
            private_key=config.private_key,
            chain_id=network.chain_id,
            gas_limit=config.trading.gas_limit,
            timeout=config.trading.timeout_secs,
            retries=config.rpc_retries,
            dry_run=config.dry_run,
            gas_mode=config.trading.gas_mode,
            gas_price_wei=config.trading.gas_price_wei,
            priority_fee_gwei=config.trading.priority_fee_gwei,
            max_fee_multiplier=config.trading.max_fee_multiplier,
            retry_backoff_secs=config.rpc_retry_backoff_secs,
        )

    # ---------- conexión / failover ----------
    @property
    def w3(self) -> Web3:
        if self._w3 is None:
            if not self._rpc_urls:
                raise UpstreamError("No Ethereum RPC URL configured")
            self._w3 = self._connect(self._rpc_urls[self._current_rpc_idx])
        return self._w3

    def _connect(self, url: str) -> Web3:
        logger.debug(f"Conectando a RPC {url}")
        return Web3(Web3.HTTPProvider(url, request_kwargs={"timeout": self._timeout}))

    def _rotate(self) -> None:
        if len(self._rpc_urls) < 2:
            return
        self._current_rpc_idx = (self._current_rpc_idx + 1) % len(self._rpc_urls)
        url = self._rpc_urls[self._current_rpc_idx]
        logger.info(f"Cambiando a RPC: {url}")
        self._w3 = self._connect(url)

    def _rpc_call(self, label: str, fn: Callable[[], Any]) -> Any:
        """
        Ejecuta una llamada RPC; con ``retries`` > 1 reintenta rotando proveedor.
        """
        last_exc: Optional[Exception] = None
        for attempt in range(1, self._retries + 1):
            try:
                return fn()
            except UpstreamError:
                raise
            except Exception as e:
                last_exc = e
                logger.warning(f"[RPC:{label}] intento {attempt}/{self._retries} falló: {e}")
                if attempt < self._retries:
                    self._rotate()
                    sleep(self._retry_backoff * attempt)
        raise UpstreamError(f"Ethereum RPC '{label}' failed: {last_exc}") from last_exc

    # ---------- util ----------
    @property
    def account(self) -> LocalAccount:
        if self._account is None:
            if not self._secret:
                raise ValidationError("No trading private key configured for Ethereum")
            try:
                self._account = Account.from_key(self._secret)
            except Exception as e:
                raise ValidationError("Invalid Ethereum private key") from e
        return self._account

    @property
    def address(self) -> str:
        return self.account.address

    def checksum(self, address: str) -> str:
        try:
            return Web3.to_checksum_address(address)
        except (ValueError, TypeError) as e:
            raise ValidationError(f"Invalid Ethereum address: {address!r}") from e

    @staticmethod
    def wei_to_ether(wei: int) -> Decimal:
        return Decimal(Web3.from_wei(int(wei), "ether"))

    @staticmethod
    def ether_to_wei(amount: str) -> int:
        return to_base_units(amount, ETH_DECIMALS)

    # ---------- detección gas ----------
    def _detect_gas_mode(self) -> str:
        if self._gas_mode_setting in ("legacy", "1559"):
            return self._gas_mode_setting
        latest = self._rpc_call("get_block_latest", lambda: self.w3.eth.get_block("latest"))
        return "1559" if latest.get("baseFeePerGas") is not None else "legacy"

    def _apply_gas_fields(self, tx: dict) -> dict:
        """
        Aplica **solo** los campos del modo activo para no mezclar
        gasPrice con maxFeePerGas/maxPriorityFeePerGas.
        """
        if self._gas_mode is None:
            self._gas_mode = self._detect_gas_mode()

        if self._gas_mode == "1559":
            latest = self._rpc_call("get_block_latest", lambda: self.w3.eth.get_block("latest"))
            base_fee = int(latest.get("baseFeePerGas") or self._rpc_call("gas_price", lambda: self.w3.eth.gas_price))
            try:
                priority = int(self.w3.eth.max_priority_fee)
            except Exception as e:
                logger.debug(f"max_priority_fee no disponible ({e}); uso {self._priority_fee_gwei} gwei")
                priority = int(Web3.to_wei(self._priority_fee_gwei, "gwei"))
            tx["type"] = 2
            tx["maxPriorityFeePerGas"] = priority
            tx["maxFeePerGas"] = int(base_fee * self._max_fee_multiplier + priority)
        else:
            tx["type"] = 0
            if self._gas_price_override > 0:
                tx["gasPrice"] = int(self._gas_price_override)
            else:
                tx["gasPrice"] = int(self._rpc_call("gas_price", lambda: self.w3.eth.gas_price))
        return tx

    # ---------- lecturas ----------
    @log_function
    def wei_balance(self, address: Optional[str] = None) -> int:
        addr = self.checksum(address or self.address)
        return int(self._rpc_call("get_balance", lambda: self.w3.eth.get_balance(addr)))

    # ---------- builders ----------
    @log_function
    def build_native_transfer(self, to: str, amount_wei: int) -> dict:
        """Transferencia simple de ETH con el gas limit configurado."""
        sender = self.address
        tx = {
            "from": sender,
            "to": self.checksum(to),
            "value": int(amount_wei),
            "gas": int(self._gas_limit),
            "nonce": self._rpc_call("get_transaction_count", lambda: self.w3.eth.get_transaction_count(sender)),
            "chainId": self._chain_id or self._rpc_call("chain_id", lambda: self.w3.eth.chain_id),
        }
        return self._apply_gas_fields(tx)

    # ---------- send ----------
    @log_function
    def sign_and_send(self, tx: dict) -> str:
        if self._dry_run:
            logger.info(f"[DRY_RUN] No se envía tx. TX={tx}")
            return "0x" + "0" * 64
        signed = self.w3.eth.account.sign_transaction(tx, private_key=self.account.key)
        tx_hash = self._rpc_call("send_raw_tx", lambda: self.w3.eth.send_raw_transaction(signed.raw_transaction))
        return Web3.to_hex(tx_hash)
