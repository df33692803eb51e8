from __future__ import annotations
import os
from typing import Optional

import requests

from tradeai.models.market_data import MarketData
from tradeai.models.risk import RiskLevels
from tradeai.utils.logger import logger_manager, log_function

logger = logger_manager.setup_logger(__name__)


def _esc(s: str) -> str:
    # escapado mínimo para Markdown
    return (s or "").replace("\\", "\\\\").replace("_", "\\_").replace("*", "\\*").replace("`", "\\`").replace("[", "\\[").replace("]", "\\]")


class TelegramService:
    """
    Alertas por Telegram. Sin TELEGRAM_TOKEN o TELEGRAM_CHAT_ID los envíos se
    desactivan y solo queda el log.
    """

    def __init__(self, token: Optional[str] = None, chat_id: Optional[str] = None, timeout: float = 10.0) -> None:
        self.token = token or os.getenv("TELEGRAM_TOKEN")
        raw_chat = chat_id or os.getenv("TELEGRAM_CHAT_ID")
        self.chat_id = int(raw_chat) if raw_chat else None
        self.timeout = timeout
        if not self.enabled:
            logger.warning("TelegramService sin TOKEN o CHAT_ID; se desactivan envíos.")

    @property
    def enabled(self) -> bool:
        return bool(self.token and self.chat_id)

    def _send(self, text: str) -> bool:
        if not self.enabled:
            return False
        payload = {"chat_id": self.chat_id, "text": text, "parse_mode": "Markdown"}
        try:
            requests.post(
                f"https://api.telegram.org/bot{self.token}/sendMessage", json=payload, timeout=self.timeout
            ).raise_for_status()
            return True
        except requests.RequestException as e:
            logger.error(f"❌ Error enviando Telegram: {e}")
            return False

    @log_function
    def notificar_riesgo(self, data: MarketData, levels: RiskLevels) -> bool:
        """Aviso de stop-loss / take-profit alcanzado (informativo, sin operar)."""
        motivo = "Stop Loss" if levels.stop_loss_triggered else "Take Profit"
        if levels.stop_loss_triggered and levels.take_profit_triggered:
            motivo = "Stop Loss y Take Profit"
        msg = (
            f"⚠️ *{motivo} alcanzado*\n\n"
            f"*Token:* {_esc(data.token)}\n"
            f"*Precio actual:* {_esc(data.price)} USD\n"
            f"*Cambio 24h:* {_esc(data.change_24h)}%"
        )
        return self._send(msg)
