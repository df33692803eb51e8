"""
Point-in-time market snapshot for a token, from a pull query or a feed tick.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class MarketData(BaseModel):
    model_config = ConfigDict(frozen=True)

    token: str
    price: str
    volume_24h: str
    change_24h: str
    timestamp: int
