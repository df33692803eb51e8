# services/market_data_service.py
from __future__ import annotations
import json
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Optional

import requests
from websockets.sync.client import connect as ws_connect

from tradeai.enums import FeedState
from tradeai.exceptions import UpstreamError
from tradeai.models.market_data import MarketData
from tradeai.repositories.subscription_repository import PriceListener, SubscriptionRepository
from tradeai.services.tick_dispatcher import TickDispatcher
from tradeai.utils.logger import logger_manager, log_function
from tradeai.utils.units import now_ms, num_str

logger = logger_manager.setup_logger(__name__)

COINGECKO_API = "https://api.coingecko.com/api/v3"
BINANCE_WS = "wss://stream.binance.com:9443/ws"


@dataclass
class _FeedConnection:
    token: str
    state: FeedState = FeedState.CONNECTING
    ws: Any = None
    thread: Optional[threading.Thread] = None
    stopping: bool = False


class MarketDataService:
    """
    Precios por consulta (CoinGecko) y por suscripción (ticker de Binance).

    Config (vía ``TradeAIConfig`` o argumentos):
      - base_url: API de precios (default: https://api.coingecko.com/api/v3)
      - ws_url: stream de tickers (default: wss://stream.binance.com:9443/ws)
      - timeout: segundos para HTTP y apertura del socket
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        ws_url: Optional[str] = None,
        timeout: float = 30.0,
        subscriptions: Optional[SubscriptionRepository] = None,
        connect: Callable[..., Any] = ws_connect,
    ) -> None:
        self.base_url = (base_url or COINGECKO_API).rstrip("/")
        self.ws_url = (ws_url or BINANCE_WS).rstrip("/")
        self.timeout = timeout
        self.subscriptions = subscriptions or SubscriptionRepository()
        self.dispatcher = TickDispatcher(self.subscriptions)
        self._connect = connect
        self._connections: Dict[str, _FeedConnection] = {}
        self._lock = threading.Lock()

    # ---------- pull ----------
    @log_function
    def get_market_data(self, token: str) -> MarketData:
        params = {
            "ids": token,
            "vs_currencies": "usd",
            "include_24hr_vol": "true",
            "include_24hr_change": "true",
        }
        try:
            r = requests.get(f"{self.base_url}/simple/price", params=params, timeout=self.timeout)
            r.raise_for_status()
            data = (r.json() or {})[token]
            return MarketData(
                token=token,
                price=num_str(data["usd"]),
                volume_24h=num_str(data["usd_24h_vol"]),
                change_24h=num_str(data["usd_24h_change"]),
                timestamp=now_ms(),
            )
        except requests.RequestException as e:
            logger.error(f"✗ Error obteniendo market data de {token}: {e}")
            raise UpstreamError(f"Price query failed for {token}: {e}") from e
        except (ValueError, KeyError, TypeError) as e:
            logger.error(f"✗ Respuesta de precios inesperada para {token}: {e!r}")
            raise UpstreamError(f"Malformed price response for {token}") from e

    # ---------- push ----------
    def stream_url(self, token: str) -> str:
        return f"{self.ws_url}/{token.lower()}usdt@ticker"

    @log_function
    def monitor_market(self, tokens: Iterable[str]) -> None:
        try:
            for token in tokens:
                self._subscribe_to_token(token)
        except Exception as e:
            logger.error(f"✗ Error al monitorizar mercado: {e}")
            raise

    def subscribe_to_price_updates(self, token: str, listener: PriceListener) -> None:
        self.subscriptions.add(token, listener)

    def unsubscribe_from_price_updates(self, token: str, listener: PriceListener) -> None:
        self.subscriptions.remove(token, listener)

    def connection_state(self, token: str) -> FeedState:
        with self._lock:
            record = self._connections.get(token)
            return record.state if record else FeedState.UNSUBSCRIBED

    @log_function
    def stop_monitoring(self, token: str) -> None:
        """Cierra el feed del token y olvida sus listeners."""
        with self._lock:
            record = self._connections.pop(token, None)
            if record:
                record.stopping = True
        self.subscriptions.clear(token)
        if record and record.ws is not None:
            record.ws.close()

    def close(self) -> None:
        with self._lock:
            tokens = list(self._connections)
        for token in tokens:
            self.stop_monitoring(token)
        self.dispatcher.stop()

    def _subscribe_to_token(self, token: str) -> None:
        with self._lock:
            if token in self._connections:
                return
            record = _FeedConnection(token=token)
            record.thread = threading.Thread(
                target=self._run_feed, args=(record,), name=f"feed-{token}", daemon=True
            )
            self._connections[token] = record
        record.thread.start()

    def _run_feed(self, record: _FeedConnection) -> None:
        token = record.token
        try:
            ws = self._connect(self.stream_url(token), open_timeout=self.timeout)
            with self._lock:
                record.ws = ws
                record.state = FeedState.LIVE
                stopping = record.stopping
            if stopping:
                ws.close()
                return
            logger.info(f"📡 Feed abierto para {token}")
            for message in ws:
                self._on_message(token, message)
        except Exception as e:
            logger.error(f"✗ Error de WebSocket para {token}: {e}")
        finally:
            with self._lock:
                # los listeners se conservan; solo se elimina la conexión
                if self._connections.get(token) is record:
                    del self._connections[token]
                record.state = FeedState.UNSUBSCRIBED
            logger.info(f"WebSocket cerrado para {token}")

    def _on_message(self, token: str, message: Any) -> None:
        try:
            ticker = json.loads(message)
            data = MarketData(
                token=token,
                price=num_str(ticker["c"]),
                volume_24h=num_str(ticker["v"]),
                change_24h=num_str(ticker["P"]),
                timestamp=now_ms(),
            )
        except (ValueError, KeyError, TypeError) as e:
            logger.warning(f"Tick inválido para {token} descartado: {e!r}")
            return
        self.dispatcher.publish(token, data)
