"""
In-memory registry of price listeners, keyed by token symbol.

Listeners for a token are kept in registration order and registered at most
once. The registry is owned by a ``MarketDataService`` instance; feed threads
and callers share it, so every access goes through a lock.
"""

from __future__ import annotations

import threading
from typing import Callable, Dict, List

from tradeai.models.market_data import MarketData

PriceListener = Callable[[MarketData], None]


class SubscriptionRepository:
    """Repository for the listeners subscribed to each token."""

    def __init__(self) -> None:
        self._listeners: Dict[str, List[PriceListener]] = {}
        self._lock = threading.Lock()

    def add(self, token: str, listener: PriceListener) -> None:
        with self._lock:
            listeners = self._listeners.setdefault(token, [])
            if listener not in listeners:
                listeners.append(listener)

    def remove(self, token: str, listener: PriceListener) -> None:
        with self._lock:
            listeners = self._listeners.get(token)
            if listeners and listener in listeners:
                listeners.remove(listener)

    def listeners(self, token: str) -> List[PriceListener]:
        """Snapshot of the listeners for ``token`` in registration order."""
        with self._lock:
            return list(self._listeners.get(token, ()))

    def clear(self, token: str) -> None:
        with self._lock:
            self._listeners.pop(token, None)
