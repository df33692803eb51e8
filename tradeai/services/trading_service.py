# services/trading_service.py
from __future__ import annotations
import uuid
from typing import Any, List, Mapping, Optional

from pydantic import ValidationError as PydanticValidationError

from tradeai.enums import Network, StrategyStatus, TradeStatus
from tradeai.exceptions import ValidationError
from tradeai.models.config import TradeAIConfig
from tradeai.models.strategy import TradingStrategy
from tradeai.models.trade import Trade
from tradeai.repositories.strategy_repository import StrategyRepository
from tradeai.schemas.trade_schema import TradeRequest
from tradeai.services.solana_service import SolanaService
from tradeai.services.web3_service import Web3Service
from tradeai.utils.logger import logger_manager, log_function
from tradeai.utils.units import now_ms, sol_to_lamports

logger = logger_manager.setup_logger(__name__)


class TradingService:
    """
    Ejecuta operaciones y guarda estrategias.

    Una "operación" es hoy una transferencia nativa de ``amount`` al campo
    ``token`` interpretado como dirección destino; no hay routing contra un DEX.
    La tx se da por completada al enviarse, sin esperar confirmación.
    """

    def __init__(
        self,
        config: TradeAIConfig,
        ethereum: Optional[Web3Service] = None,
        solana: Optional[SolanaService] = None,
        strategies: Optional[StrategyRepository] = None,
    ) -> None:
        self.config = config
        self._ethereum = ethereum
        self._solana = solana
        self.strategies = strategies or StrategyRepository()

    @property
    def ethereum(self) -> Web3Service:
        if self._ethereum is None:
            self._ethereum = Web3Service.from_config(self.config)
        return self._ethereum

    @property
    def solana(self) -> SolanaService:
        if self._solana is None:
            self._solana = SolanaService.from_config(self.config)
        return self._solana

    # ---------- trades ----------
    @log_function
    def execute_trade(self, trade: TradeRequest | Mapping[str, Any]) -> Trade:
        try:
            request = self._validate_trade(trade)
            network = Network.parse(request.network)
            if network is Network.ETHEREUM:
                tx_hash = self._execute_ethereum_trade(request)
            else:
                tx_hash = self._execute_solana_trade(request)
            result = self._record(request, network, tx_hash)
            logger.info(f"✅ Trade {result.id} enviado en {network.value}: {tx_hash}")
            return result
        except Exception as e:
            logger.error(f"✗ Error ejecutando trade: {e}")
            raise

    def _validate_trade(self, trade: TradeRequest | Mapping[str, Any]) -> TradeRequest:
        request = TradeRequest.from_params(trade)
        if request.amount_value <= 0:
            raise ValidationError("Trade amount must be positive")
        if request.amount_value > self.config.risk_management.max_position_size:
            raise ValidationError("Trade amount exceeds maximum position size")
        return request

    def _execute_ethereum_trade(self, request: TradeRequest) -> str:
        tx = self.ethereum.build_native_transfer(request.token, Web3Service.ether_to_wei(request.amount))
        return self.ethereum.sign_and_send(tx)

    def _execute_solana_trade(self, request: TradeRequest) -> str:
        tx = self.solana.build_native_transfer(request.token, sol_to_lamports(request.amount))
        return self.solana.send_transaction(tx)

    @staticmethod
    def _record(request: TradeRequest, network: Network, tx_hash: str) -> Trade:
        return Trade(
            id=uuid.uuid4().hex[:8],
            network=network,
            side=request.side,
            token=request.token,
            amount=request.amount,
            price=request.price,
            timestamp=now_ms(),
            status=TradeStatus.COMPLETED,
            tx_hash=tx_hash,
        )

    # ---------- estrategias ----------
    @log_function
    def set_trading_strategy(self, strategy: TradingStrategy | Mapping[str, Any]) -> StrategyStatus:
        try:
            validated = self._validate_strategy(strategy)
            self.strategies.save(validated)
            if validated.active:
                return self._apply_strategy(validated)
            return StrategyStatus.STORED
        except Exception as e:
            logger.error(f"✗ Error guardando estrategia: {e}")
            raise

    def get_trading_strategy(self, strategy_id: str) -> Optional[TradingStrategy]:
        return self.strategies.get(strategy_id)

    def list_trading_strategies(self) -> List[TradingStrategy]:
        return self.strategies.list_all()

    @staticmethod
    def _validate_strategy(strategy: TradingStrategy | Mapping[str, Any]) -> TradingStrategy:
        if isinstance(strategy, TradingStrategy):
            values = strategy.model_dump()
        else:
            values = dict(strategy or {})
        if not values.get("id") or not values.get("name") or values.get("parameters") is None:
            raise ValidationError("Invalid strategy parameters")
        try:
            return TradingStrategy.model_validate(values)
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid strategy parameters: {e}") from e

    def _apply_strategy(self, strategy: TradingStrategy) -> StrategyStatus:
        # TODO: traducir parameters a órdenes cuando exista routing contra un DEX
        logger.info(f"Aplicando estrategia: {strategy.name} (sin acciones de trading todavía)")
        return StrategyStatus.APPLY_NOT_SUPPORTED
