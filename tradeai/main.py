# main.py
from __future__ import annotations
import argparse
import json
import signal
import sys
import threading
from typing import Any, List, Optional

from pydantic import BaseModel

from tradeai.controllers.risk_monitor_controller import RiskMonitorController
from tradeai.exceptions import TradeAIError
from tradeai.models.market_data import MarketData
from tradeai.plugin import TradeAIPlugin, build_plugin
from tradeai.utils.logger import logger_manager

logger = logger_manager.setup_logger(__name__)


def _print(result: Any) -> None:
    if isinstance(result, BaseModel):
        result = result.model_dump(mode="json", by_alias=True)
    print(json.dumps(result, indent=2, default=str))


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="tradeai", description="TradeAI plugin actions from the command line")
    sub = parser.add_subparsers(dest="command", required=True)

    market = sub.add_parser("market", help="precio, volumen y cambio 24h de un token")
    market.add_argument("token")

    portfolio = sub.add_parser("portfolio", help="saldo nativo y valor de la wallet")
    portfolio.add_argument("network", choices=["ethereum", "solana"])

    trade = sub.add_parser("trade", help="envía una transferencia nativa")
    trade.add_argument("--network", required=True)
    trade.add_argument("--side", required=True, choices=["buy", "sell"])
    trade.add_argument("--token", required=True, help="dirección destino")
    trade.add_argument("--amount", required=True)
    trade.add_argument("--price", required=True)
    trade.add_argument("--check-risk", action="store_true", help="valida reglas de riesgo antes de enviar")

    strategy = sub.add_parser("strategy", help="guarda una estrategia desde un JSON")
    strategy.add_argument("file")

    monitor = sub.add_parser("monitor", help="sigue los tickers hasta Ctrl+C")
    monitor.add_argument("tokens", nargs="+")
    monitor.add_argument("--stop-loss", type=float, help="precio de stop-loss (todos los tokens)")
    monitor.add_argument("--take-profit", type=float, help="precio de take-profit (todos los tokens)")
    monitor.add_argument("--side", default="buy", choices=["buy", "sell"])
    return parser


def _run_monitor(plugin: TradeAIPlugin, args: argparse.Namespace) -> None:
    stop_evt = threading.Event()

    def shutdown(*_):
        logger.info("🛑 Señal de apagado recibida, cerrando feeds...")
        stop_evt.set()

    signal.signal(signal.SIGINT, shutdown)
    signal.signal(signal.SIGTERM, shutdown)

    def _log_tick(data: MarketData) -> None:
        logger.info(f"[{data.token}] precio={data.price} vol24h={data.volume_24h} cambio24h={data.change_24h}%")

    for token in args.tokens:
        if args.stop_loss is not None:
            plugin.risk.set_stop_loss(token, args.stop_loss, args.side)
        if args.take_profit is not None:
            plugin.risk.set_take_profit(token, args.take_profit, args.side)
        plugin.market_data.subscribe_to_price_updates(token, _log_tick)

    RiskMonitorController(plugin.market_data, plugin.risk).watch(args.tokens)
    logger.info(f"🚀 Monitorizando {', '.join(args.tokens)}")
    while not stop_evt.wait(0.5):
        pass


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    plugin = build_plugin()
    try:
        if args.command == "market":
            _print(plugin.invoke("getMarketData", {"token": args.token}))
        elif args.command == "portfolio":
            _print(plugin.invoke("getPortfolio", {"network": args.network}))
        elif args.command == "trade":
            params = {
                "network": args.network,
                "side": args.side,
                "token": args.token,
                "amount": args.amount,
                "price": args.price,
            }
            if args.check_risk and not plugin.risk.validate_trade(params):
                logger.error("Trade rechazado por las reglas de riesgo")
                return 2
            _print(plugin.invoke("executeTrade", params))
        elif args.command == "strategy":
            with open(args.file, "r", encoding="utf-8") as f:
                strategy = json.load(f)
            _print({"status": plugin.trading.set_trading_strategy(strategy).value})
        elif args.command == "monitor":
            _run_monitor(plugin, args)
        return 0
    except TradeAIError as e:
        logger.error(f"✗ {type(e).__name__}: {e}")
        return 1
    finally:
        plugin.close()


if __name__ == "__main__":
    sys.exit(main())
