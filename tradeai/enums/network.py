"""
Enumeration of the blockchain networks the plugin can trade on.
"""

from __future__ import annotations

from enum import Enum

from tradeai.exceptions import UnsupportedNetworkError


class Network(str, Enum):
    """Supported networks, keyed by the tag the agent host sends."""

    ETHEREUM = "ethereum"
    SOLANA = "solana"

    @property
    def native_symbol(self) -> str:
        return "ETH" if self is Network.ETHEREUM else "SOL"

    @property
    def price_id(self) -> str:
        """Identifier of the native asset in the price index."""
        return self.value

    @classmethod
    def parse(cls, value: "str | Network") -> "Network":
        """Return the member for ``value`` or raise ``UnsupportedNetworkError``."""
        try:
            return cls(str(value.value if isinstance(value, Network) else value).lower())
        except ValueError:
            raise UnsupportedNetworkError(f"Unsupported network: {value}") from None
