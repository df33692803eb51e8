from __future__ import annotations

from typing import Any, Dict

from pydantic import BaseModel


class TradingStrategy(BaseModel):
    id: str
    name: str
    description: str = ""
    parameters: Dict[str, Any]
    active: bool = False
