from __future__ import annotations

from typing import Dict, List, Literal, Optional
from pydantic import BaseModel, Field


# ---- Base + envelope ----

class BaseEvent(BaseModel):
    event_type: str
    ts: int
    session_id: str = "s1"
    symbol: Optional[str] = None
    tags: List[str] = []


class EventEnvelope(BaseModel):
    schema_version: str = "v1"
    correlation_id: str
    sequence: int = 0
    event: BaseEvent


# ---- Event types ----

class TradeExecuted(BaseEvent):
    event_type: Literal["trade_executed"] = "trade_executed"
    side: Literal["BUY", "SELL"]
    qty: int
    price: float
    cash_after: float


class TradeRejected(BaseEvent):
    event_type: Literal["trade_rejected"] = "trade_rejected"
    side: Literal["BUY", "SELL"]
    reason: str
    qty: Optional[int] = None
    price: Optional[float] = None


class MarketDrifted(BaseEvent):
    event_type: Literal["market_drifted"] = "market_drifted"
    prices: Dict[str, float] = Field(default_factory=dict)


class PortfolioSaved(BaseEvent):
    event_type: Literal["portfolio_saved"] = "portfolio_saved"
    path: str
    cash: float
    holdings: int
    transactions: int


class PortfolioLoaded(BaseEvent):
    event_type: Literal["portfolio_loaded"] = "portfolio_loaded"
    path: str
    cash: float
    holdings: int
    transactions: int
    skipped_lines: int = 0


class StoreFailed(BaseEvent):
    event_type: Literal["store_failed"] = "store_failed"
    op: Literal["save", "load"]
    path: str
    error: str

