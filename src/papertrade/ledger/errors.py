"""Trade and persistence error taxonomy.

Every `TradeError` is recoverable: the operation that raised it made no state
change, and the CLI reports the message and keeps looping. `reason` is the
short slug used for metrics labels and `trade_rejected` events.
"""
from __future__ import annotations

from typing import Optional


class TradeError(Exception):
    reason = "trade_error"

    def __init__(self, message: str, symbol: Optional[str] = None):
        super().__init__(message)
        self.symbol = symbol


class InvalidQuantity(TradeError):
    reason = "invalid_quantity"

    def __init__(self, quantity: object, symbol: Optional[str] = None):
        super().__init__(f"Quantity must be a positive integer, got {quantity!r}", symbol)
        self.quantity = quantity


class InvalidPrice(TradeError):
    reason = "invalid_price"

    def __init__(self, price: object, symbol: Optional[str] = None):
        super().__init__(f"Price must be positive, got {price!r}", symbol)
        self.price = price


class InvalidSymbol(TradeError):
    reason = "invalid_symbol"

    def __init__(self, symbol: object):
        super().__init__(f"Invalid symbol: {symbol!r}", symbol if isinstance(symbol, str) else None)


class UnknownSymbol(TradeError):
    reason = "unknown_symbol"

    def __init__(self, symbol: str):
        super().__init__(f"Unknown symbol: {symbol}", symbol)


class InsufficientFunds(TradeError):
    reason = "insufficient_funds"

    def __init__(self, symbol: str, cost: float, cash: float):
        super().__init__(f"Insufficient cash. Need {cost:.2f} but have {cash:.2f}", symbol)
        self.cost = cost
        self.cash = cash


class NoHoldings(TradeError):
    reason = "no_holdings"

    def __init__(self, symbol: str):
        super().__init__(f"You don't own any shares of {symbol}", symbol)


class InsufficientShares(TradeError):
    reason = "insufficient_shares"

    def __init__(self, symbol: str, requested: int, owned: int):
        super().__init__(f"Cannot sell more than you own. Owned: {owned}", symbol)
        self.requested = requested
        self.owned = owned


class PersistenceError(Exception):
    """Save/load of the portfolio store failed; the session keeps in-memory state."""


class ParseError(PersistenceError):
    def __init__(self, line_no: int, line: str, why: str):
        super().__init__(f"line {line_no}: {why}: {line!r}")
        self.line_no = line_no
        self.line = line
        self.why = why
