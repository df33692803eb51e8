"""
Wallet holdings on one network, recomputed on every read.
"""

from __future__ import annotations

from typing import Dict

from pydantic import BaseModel

from tradeai.enums import Network, SupportStatus


class TokenHolding(BaseModel):
    balance: str
    value: str


class Portfolio(BaseModel):
    network: Network
    tokens: Dict[str, TokenHolding]
    total_value: str
    # ERC-20 / SPL balances are not enumerated yet; only the native asset is.
    token_enumeration: SupportStatus = SupportStatus.NOT_SUPPORTED
