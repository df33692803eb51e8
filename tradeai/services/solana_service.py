# services/solana_service.py
from __future__ import annotations
import base64
import json
from typing import Any, List, Optional

import requests
from solders.hash import Hash
from solders.keypair import Keypair
from solders.message import Message
from solders.pubkey import Pubkey
from solders.system_program import TransferParams, transfer
from solders.transaction import Transaction

from tradeai.exceptions import UpstreamError, ValidationError
from tradeai.models.config import TradeAIConfig
from tradeai.utils.logger import logger_manager, log_function

logger = logger_manager.setup_logger(__name__)


def _load_keypair(secret: str) -> Keypair:
    """Acepta base58 (formato Phantom) o el array JSON de ``solana-keygen``."""
    secret = secret.strip()
    try:
        if secret.startswith("["):
            return Keypair.from_bytes(bytes(json.loads(secret)))
        return Keypair.from_base58_string(secret)
    except Exception as e:
        raise ValidationError("Invalid Solana private key") from e


class SolanaService:
    """
    Cliente JSON-RPC de Solana sobre requests.

    La firma y serialización de transacciones la hace solders; el envío es un
    ``sendTransaction`` en base64.
    """

    def __init__(
        self,
        rpc_url: str,
        private_key: Optional[str] = None,
        wallet_address: Optional[str] = None,
        timeout: float = 30.0,
        dry_run: bool = False,
    ) -> None:
        self.rpc_url = rpc_url
        self._secret = private_key
        self._keypair: Optional[Keypair] = None
        self._wallet_address = wallet_address
        self._timeout = timeout
        self._dry_run = dry_run

    @classmethod
    def from_config(cls, config: TradeAIConfig) -> "SolanaService":
        return cls(
            rpc_url=config.networks.solana.rpc_url,
            private_key=config.solana_private_key or config.private_key or None,
            wallet_address=config.solana_wallet_address,
            timeout=config.trading.timeout_secs,
            dry_run=config.dry_run,
        )

    # ---------- rpc ----------
    def _rpc(self, method: str, params: Optional[List[Any]] = None) -> Any:
        if not self.rpc_url:
            raise UpstreamError("No Solana RPC URL configured")
        payload = {"jsonrpc": "2.0", "id": 1, "method": method, "params": params or []}
        try:
            r = requests.post(self.rpc_url, json=payload, timeout=self._timeout)
            r.raise_for_status()
            body = r.json()
        except requests.RequestException as e:
            logger.error(f"✗ [RPC:{method}] {e}")
            raise UpstreamError(f"Solana RPC '{method}' failed: {e}") from e
        if not isinstance(body, dict) or "error" in body or "result" not in body:
            error = body.get("error") if isinstance(body, dict) else body
            logger.error(f"✗ [RPC:{method}] respuesta de error: {error}")
            raise UpstreamError(f"Solana RPC '{method}' returned an error: {error}")
        return body["result"]

    # ---------- util ----------
    @property
    def keypair(self) -> Keypair:
        if self._keypair is None:
            if not self._secret:
                raise ValidationError("No Solana private key configured")
            self._keypair = _load_keypair(self._secret)
        return self._keypair

    @property
    def address(self) -> str:
        if self._wallet_address:
            return self._wallet_address
        return str(self.keypair.pubkey())

    @staticmethod
    def pubkey(address: str) -> Pubkey:
        try:
            return Pubkey.from_string(address)
        except Exception as e:
            raise ValidationError(f"Invalid Solana address: {address!r}") from e

    # ---------- lecturas ----------
    @log_function
    def lamports_balance(self, address: Optional[str] = None) -> int:
        owner = str(self.pubkey(address or self.address))
        result = self._rpc("getBalance", [owner, {"commitment": "confirmed"}])
        try:
            return int(result["value"])
        except (KeyError, TypeError, ValueError) as e:
            raise UpstreamError(f"Malformed getBalance response: {result!r}") from e

    def latest_blockhash(self) -> Hash:
        result = self._rpc("getLatestBlockhash", [{"commitment": "finalized"}])
        try:
            return Hash.from_string(result["value"]["blockhash"])
        except (KeyError, TypeError, ValueError) as e:
            raise UpstreamError(f"Malformed getLatestBlockhash response: {result!r}") from e

    # ---------- builders ----------
    @log_function
    def build_native_transfer(self, to: str, lamports: int) -> Transaction:
        """Transferencia de SOL vía System Program, firmada con la wallet."""
        keypair = self.keypair
        ix = transfer(TransferParams(
            from_pubkey=keypair.pubkey(),
            to_pubkey=self.pubkey(to),
            lamports=int(lamports),
        ))
        blockhash = self.latest_blockhash()
        message = Message.new_with_blockhash([ix], keypair.pubkey(), blockhash)
        return Transaction([keypair], message, blockhash)

    # ---------- send ----------
    @log_function
    def send_transaction(self, tx: Transaction) -> str:
        if self._dry_run:
            logger.info(f"[DRY_RUN] No se envía tx Solana. TX={tx}")
            return str(tx.signatures[0])
        encoded = base64.b64encode(bytes(tx)).decode("ascii")
        return str(self._rpc("sendTransaction", [encoded, {"encoding": "base64"}]))
