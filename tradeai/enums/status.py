"""
Status enumerations reported by the services.

``SupportStatus`` and ``StrategyStatus`` let callers tell "nothing there" apart
from "not implemented yet".
"""

from __future__ import annotations

from enum import Enum


class SupportStatus(str, Enum):
    AVAILABLE = "available"
    NOT_SUPPORTED = "not_supported"


class StrategyStatus(str, Enum):
    STORED = "stored"
    APPLY_NOT_SUPPORTED = "apply_not_supported"


class FeedState(str, Enum):
    """Lifecycle of a per-token push subscription."""

    UNSUBSCRIBED = "unsubscribed"
    CONNECTING = "connecting"
    LIVE = "live"
