"""Ledger package.

Public API:
- Ledger: cash + holdings with invariant-preserving buy/sell and valuation.
- TransactionLog, Transaction, TradeResult: the append-only trade record.
- TradeError and subclasses, PersistenceError, ParseError.
"""

from .ledger import Ledger, replay  # re-export
from .history import TransactionLog
from .model import Transaction, TradeResult
from .errors import (
    TradeError,
    InvalidQuantity,
    InvalidPrice,
    InvalidSymbol,
    UnknownSymbol,
    InsufficientFunds,
    NoHoldings,
    InsufficientShares,
    PersistenceError,
    ParseError,
)
