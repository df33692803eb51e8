# services/risk_management_service.py
from __future__ import annotations
from typing import Any, Mapping, Optional

from tradeai.enums import TradeSide
from tradeai.models.config import TradeAIConfig
from tradeai.models.risk import RiskLevels, RiskThreshold
from tradeai.repositories.threshold_repository import ThresholdRepository
from tradeai.schemas.trade_schema import TradeRequest
from tradeai.services.market_data_service import MarketDataService
from tradeai.services.portfolio_service import PortfolioService
from tradeai.utils.logger import logger_manager, log_function

logger = logger_manager.setup_logger(__name__)

MAX_PORTFOLIO_EXPOSURE = 0.2   # fracción del valor total por operación
MAX_VOLATILITY_PCT = 10.0      # |cambio 24h| máximo en %


class RiskManagementService:
    """
    Reglas previas a una operación y umbrales de stop-loss / take-profit.

    ``validate_trade`` falla cerrado: cualquier error cuenta como rechazo.
    La exposición se calcula contra una lectura en vivo del portfolio sin
    bloqueo, así que dos validaciones concurrentes pueden ver el mismo saldo.
    """

    def __init__(
        self,
        config: TradeAIConfig,
        market_data: MarketDataService,
        portfolio: PortfolioService,
        thresholds: Optional[ThresholdRepository] = None,
    ) -> None:
        self.config = config
        self.market_data = market_data
        self.portfolio = portfolio
        self.thresholds = thresholds or ThresholdRepository()

    # ---------- validación ----------
    @log_function
    def validate_trade(self, trade: TradeRequest | Mapping[str, Any]) -> bool:
        try:
            request = TradeRequest.from_params(trade)
            if not self._validate_position_size(request):
                logger.info(f"Rechazada: {request.amount} supera el tamaño máximo de posición")
                return False
            if not self._validate_portfolio_exposure(request):
                logger.info(f"Rechazada: exposición excesiva para {request.token} en {request.network}")
                return False
            if not self._validate_market_conditions(request):
                logger.info(f"Rechazada: {request.token} demasiado volátil")
                return False
            return True
        except Exception as e:
            logger.error(f"✗ Validación de trade fallida: {e}")
            return False

    def _validate_position_size(self, request: TradeRequest) -> bool:
        return request.amount_value <= self.config.risk_management.max_position_size

    def _validate_portfolio_exposure(self, request: TradeRequest) -> bool:
        portfolio = self.portfolio.get_portfolio(request.network)
        total_value = float(portfolio.total_value)
        return request.notional <= total_value * MAX_PORTFOLIO_EXPOSURE

    def _validate_market_conditions(self, request: TradeRequest) -> bool:
        market = self.market_data.get_market_data(request.token)
        return abs(float(market.change_24h)) <= MAX_VOLATILITY_PCT

    # ---------- umbrales ----------
    def set_stop_loss(self, token: str, price: float, side: str | TradeSide) -> None:
        self.thresholds.set_stop_loss(token, RiskThreshold(price=price, side=TradeSide(side)))

    def set_take_profit(self, token: str, price: float, side: str | TradeSide) -> None:
        self.thresholds.set_take_profit(token, RiskThreshold(price=price, side=TradeSide(side)))

    @log_function
    def set_default_levels(self, token: str, entry_price: float, side: str | TradeSide) -> RiskLevels:
        """
        Fija stop-loss y take-profit a partir de los porcentajes configurados.

        Devuelve los niveles evaluados al precio de entrada (ninguno disparado).
        """
        side = TradeSide(side)
        sl = self.config.risk_management.stop_loss / 100.0
        tp = self.config.risk_management.take_profit / 100.0
        if side is TradeSide.BUY:
            stop, take = entry_price * (1 - sl), entry_price * (1 + tp)
        else:
            stop, take = entry_price * (1 + sl), entry_price * (1 - tp)
        self.set_stop_loss(token, stop, side)
        self.set_take_profit(token, take, side)
        return self.check_risk_levels(token, entry_price)

    def clear_levels(self, token: str) -> None:
        self.thresholds.clear(token)

    def check_risk_levels(self, token: str, current_price: float) -> RiskLevels:
        stop_loss = self.thresholds.get_stop_loss(token)
        take_profit = self.thresholds.get_take_profit(token)
        return RiskLevels(
            stop_loss_triggered=self._check_stop_loss(current_price, stop_loss) if stop_loss else False,
            take_profit_triggered=self._check_take_profit(current_price, take_profit) if take_profit else False,
        )

    @staticmethod
    def _check_stop_loss(current_price: float, stop_loss: RiskThreshold) -> bool:
        if stop_loss.side is TradeSide.BUY:
            return current_price <= stop_loss.price
        return current_price >= stop_loss.price

    @staticmethod
    def _check_take_profit(current_price: float, take_profit: RiskThreshold) -> bool:
        if take_profit.side is TradeSide.BUY:
            return current_price >= take_profit.price
        return current_price <= take_profit.price
