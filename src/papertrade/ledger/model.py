from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Literal

TradeType = Literal["BUY", "SELL"]

# separators of the saved-portfolio line format
_RESERVED = (",", "\n", "\r")


def is_valid_symbol(symbol: object) -> bool:
    """A symbol that survives the save file: non-empty, no separators, no surrounding whitespace."""
    return (
        isinstance(symbol, str)
        and bool(symbol)
        and symbol == symbol.strip()
        and not any(c in symbol for c in _RESERVED)
    )


@dataclass(frozen=True)
class Transaction:
    timestamp: datetime
    symbol: str
    qty: int  # positive buy, negative sell
    price: float
    type: TradeType

    @property
    def notional(self) -> float:
        return abs(self.qty) * self.price

    @property
    def cash_delta(self) -> float:
        return -self.qty * self.price

    def describe(self) -> str:
        return f"{self.timestamp:%Y-%m-%d %H:%M:%S} | {self.type} {abs(self.qty)} @ {self.price:.2f} | {self.symbol}"


@dataclass(frozen=True)
class TradeResult:
    cash: float
    transaction: Transaction
