"""
Data schema for incoming trade requests.

A ``TradeRequest`` is a trade without id, status or timestamp: what the agent
host sends to ``executeTrade``. Amount and price stay decimal strings and are
parsed to float only where arithmetic needs them.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Mapping

from tradeai.enums import TradeSide
from tradeai.exceptions import ValidationError

_REQUIRED = ("network", "side", "token", "amount", "price")


def _as_float(field: str, raw: str) -> float:
    try:
        value = float(raw)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid trade parameters: {field}={raw!r} is not a number") from None
    if not math.isfinite(value):
        raise ValidationError(f"Invalid trade parameters: {field}={raw!r} is not finite")
    return value


@dataclass(frozen=True)
class TradeRequest:
    """Schema for requesting a trade."""

    network: str
    side: TradeSide
    token: str
    amount: str
    price: str

    @classmethod
    def from_params(cls, params: Mapping[str, Any]) -> "TradeRequest":
        """Build a request from raw action parameters.

        ``type`` is accepted as an alias of ``side``. Every field is required and
        amount/price must be numeric; otherwise ``ValidationError`` is raised.
        The network tag is not checked here: dispatch reports unknown networks.
        """
        if isinstance(params, TradeRequest):
            return params
        values = dict(params or {})
        if not values.get("side") and values.get("type"):
            values["side"] = values["type"]

        missing = [f for f in _REQUIRED if values.get(f) in (None, "")]
        if missing:
            raise ValidationError(f"Invalid trade parameters: missing {', '.join(missing)}")

        try:
            side = TradeSide(str(getattr(values["side"], "value", values["side"])).lower())
        except ValueError:
            raise ValidationError(f"Invalid trade parameters: side={values['side']!r}") from None

        _as_float("amount", values["amount"])
        _as_float("price", values["price"])
        return cls(
            network=str(getattr(values["network"], "value", values["network"])).lower(),
            side=side,
            token=str(values["token"]),
            amount=str(values["amount"]),
            price=str(values["price"]),
        )

    @property
    def amount_value(self) -> float:
        return _as_float("amount", self.amount)

    @property
    def price_value(self) -> float:
        return _as_float("price", self.price)

    @property
    def notional(self) -> float:
        """Amount times price."""
        return self.amount_value * self.price_value
