"""
A trade as returned to the agent host once it has been submitted.

Amounts and prices stay decimal strings; nothing here does arithmetic.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from tradeai.enums import Network, TradeSide, TradeStatus


class Trade(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    network: Network
    side: TradeSide = Field(alias="type")
    token: str
    amount: str
    price: str
    timestamp: int
    status: TradeStatus
    tx_hash: Optional[str] = None
