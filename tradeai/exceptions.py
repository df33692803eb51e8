"""
Exception hierarchy for the tradeai plugin.

Clients wrap library failures (requests, web3, websockets, malformed payloads)
into ``UpstreamError`` at their boundary so services and the agent host only
deal with these types.
"""

from __future__ import annotations


class TradeAIError(Exception):
    """Base class for every error raised by the plugin."""


class UpstreamError(TradeAIError):
    """A price API, ticker stream or blockchain RPC call failed."""


class ValidationError(TradeAIError):
    """Trade or strategy parameters are missing or out of bounds."""


class UnsupportedNetworkError(TradeAIError):
    """The network tag is neither ``ethereum`` nor ``solana``."""
