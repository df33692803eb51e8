"""
TradeAI: trading actions (execute trade, market data, portfolio, strategy,
market monitoring) for an AI-agent host, on Ethereum and Solana.
"""

__version__ = "0.1.0"
