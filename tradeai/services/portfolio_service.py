# services/portfolio_service.py
from __future__ import annotations
from decimal import Decimal
from typing import Dict, Optional

from tradeai.enums import Network, SupportStatus
from tradeai.models.config import TradeAIConfig
from tradeai.models.portfolio import Portfolio, TokenHolding
from tradeai.services.market_data_service import MarketDataService
from tradeai.services.solana_service import SolanaService
from tradeai.services.web3_service import Web3Service
from tradeai.utils.logger import logger_manager, log_function
from tradeai.utils.units import lamports_to_sol

logger = logger_manager.setup_logger(__name__)


class PortfolioService:
    """
    Lee el saldo nativo de la wallet en cada red y lo valora con el precio actual.

    Solo se consulta el activo nativo (ETH / SOL); los saldos ERC-20 y SPL aún no
    se enumeran y el portfolio lo indica con ``token_enumeration``.
    """

    def __init__(
        self,
        config: TradeAIConfig,
        market_data: MarketDataService,
        ethereum: Optional[Web3Service] = None,
        solana: Optional[SolanaService] = None,
    ) -> None:
        self.config = config
        self.market_data = market_data
        self._ethereum = ethereum
        self._solana = solana

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

    @log_function
    def get_portfolio(self, network: str | Network) -> Portfolio:
        try:
            net = Network.parse(network)
            if net is Network.ETHEREUM:
                return self._get_ethereum_portfolio()
            return self._get_solana_portfolio()
        except Exception as e:
            logger.error(f"✗ Error obteniendo portfolio ({network}): {e}")
            raise

    def _get_ethereum_portfolio(self) -> Portfolio:
        balance = Web3Service.wei_to_ether(self.ethereum.wei_balance())
        price = self.market_data.get_market_data(Network.ETHEREUM.price_id)
        tokens = {Network.ETHEREUM.native_symbol: self._holding(balance, price.price)}
        return self._portfolio(Network.ETHEREUM, tokens)

    def _get_solana_portfolio(self) -> Portfolio:
        balance = lamports_to_sol(self.solana.lamports_balance())
        price = self.market_data.get_market_data(Network.SOLANA.price_id)
        tokens = {Network.SOLANA.native_symbol: self._holding(balance, price.price)}
        return self._portfolio(Network.SOLANA, tokens)

    @staticmethod
    def _holding(balance: Decimal, price: str) -> TokenHolding:
        return TokenHolding(
            balance=str(balance),
            value=str(float(balance) * float(price)),
        )

    @staticmethod
    def _portfolio(network: Network, tokens: Dict[str, TokenHolding]) -> Portfolio:
        total = sum(float(t.value) for t in tokens.values())
        return Portfolio(
            network=network,
            tokens=tokens,
            total_value=str(total),
            token_enumeration=SupportStatus.NOT_SUPPORTED,
        )
