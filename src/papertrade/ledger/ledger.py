from __future__ import annotations

from datetime import datetime
from typing import Callable, Dict, Iterable, Mapping, Optional, Tuple
import logging

from .errors import (
    InsufficientFunds,
    InsufficientShares,
    InvalidPrice,
    InvalidQuantity,
    InvalidSymbol,
    NoHoldings,
    TradeError,
    UnknownSymbol,
)
from .history import TransactionLog
from .model import TradeResult, TradeType, Transaction, is_valid_symbol
from ..events.bus import emit, now_ms
from ..events.schema import TradeExecuted, TradeRejected
from ..market.catalog import PriceCatalog
from ..metrics.trading import (
    get_traded_notional_total,
    get_trades_executed_total,
    get_trades_rejected_total,
    set_portfolio_gauges,
)


logger = logging.getLogger(__name__)


class Ledger:
    """Cash balance plus per-symbol share counts.

    buy/sell validate first and mutate second, so a raised `TradeError`
    always leaves cash, holdings and the transaction log untouched.
    Holdings never store a zero entry.
    """

    def __init__(
        self,
        cash: float = 10_000.0,
        holdings: Optional[Mapping[str, int]] = None,
        history: Optional[TransactionLog] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self._cash = float(cash)
        self._holdings: Dict[str, int] = {}
        for sym, qty in (holdings or {}).items():
            if int(qty) < 0:
                raise ValueError(f"negative holding for {sym}: {qty}")
            if int(qty) > 0:
                self._holdings[sym] = int(qty)
        self.history = history if history is not None else TransactionLog()
        self.clock = clock
        # index into history where this session's cash accounting starts
        self._mark = len(self.history)
        self._cash_at_mark = self._cash
        self._executed = get_trades_executed_total()
        self._rejected = get_trades_rejected_total()
        self._notional = get_traded_notional_total()

    # ---- read accessors ----
    @property
    def cash(self) -> float:
        return self._cash

    @property
    def holdings(self) -> Dict[str, int]:
        return dict(self._holdings)

    @property
    def transactions(self) -> Tuple[Transaction, ...]:
        return self.history.snapshot()

    def quantity(self, symbol: str) -> int:
        return self._holdings.get(symbol, 0)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Ledger):
            return NotImplemented
        return self._cash == other._cash and self._holdings == other._holdings

    def __repr__(self) -> str:
        return f"Ledger(cash={self._cash!r}, holdings={self._holdings!r})"

    # ---- trading ----
    def buy(
        self,
        symbol: str,
        quantity: int,
        unit_price: Optional[float] = None,
        catalog: Optional[PriceCatalog] = None,
    ) -> TradeResult:
        try:
            _check_quantity(quantity, symbol)
            symbol = _canonical_symbol(symbol, catalog)
            price = _resolve_price(symbol, unit_price, catalog)
            cost = quantity * price
            if cost > self._cash:
                raise InsufficientFunds(symbol, cost, self._cash)
        except TradeError as e:
            self._on_rejected("BUY", e, quantity, unit_price)
            raise
        self._cash -= cost
        self._holdings[symbol] = self._holdings.get(symbol, 0) + quantity
        return self._record(symbol, quantity, price, "BUY")

    def sell(
        self,
        symbol: str,
        quantity: int,
        unit_price: Optional[float] = None,
        catalog: Optional[PriceCatalog] = None,
    ) -> TradeResult:
        try:
            _check_quantity(quantity, symbol)
            symbol = _canonical_symbol(symbol, catalog)
            owned = self._holdings.get(symbol, 0)
            if owned == 0:
                raise NoHoldings(symbol)
            if quantity > owned:
                raise InsufficientShares(symbol, quantity, owned)
            price = _resolve_price(symbol, unit_price, catalog)
        except TradeError as e:
            self._on_rejected("SELL", e, quantity, unit_price)
            raise
        self._cash += quantity * price
        remaining = owned - quantity
        if remaining == 0:
            del self._holdings[symbol]
        else:
            self._holdings[symbol] = remaining
        return self._record(symbol, -quantity, price, "SELL")

    def valuation(self, catalog: PriceCatalog) -> float:
        total = self._cash
        for sym, qty in self._holdings.items():
            total += qty * float(catalog.price(sym, 0.0) or 0.0)
        set_portfolio_gauges(self._cash, total)
        return total

    def reconciles(self) -> bool:
        """True when cash moved since load equals the cash flow of the trades logged since load."""
        drift = (self._cash - self._cash_at_mark) - self.history.net_cash_flow(self._mark)
        return abs(drift) <= 1e-9 * max(1.0, abs(self._cash_at_mark))

    # ---- helpers ----
    def _record(self, symbol: str, signed_qty: int, price: float, side: TradeType) -> TradeResult:
        t = Transaction(timestamp=self.clock(), symbol=symbol, qty=signed_qty, price=price, type=side)
        self.history.append(t)
        self._executed.labels(side, symbol).inc()
        self._notional.labels(side).inc(t.notional)
        set_portfolio_gauges(self._cash)
        logger.info(f"{side.lower()} {abs(signed_qty)} {symbol} @ {price:.2f}; cash={self._cash:.2f}")
        try:
            emit(TradeExecuted(
                ts=now_ms(), symbol=symbol, side=side, qty=signed_qty, price=price, cash_after=self._cash,
            ))
        except Exception:
            logger.debug("trade event not published", exc_info=True)
        return TradeResult(cash=self._cash, transaction=t)

    def _on_rejected(self, side: TradeType, err: TradeError, quantity: object, unit_price: Optional[float]) -> None:
        self._rejected.labels(err.reason).inc()
        logger.warning(f"{side.lower()} rejected ({err.reason}): {err}")
        try:
            emit(TradeRejected(
                ts=now_ms(),
                symbol=err.symbol,
                side=side,
                reason=err.reason,
                qty=quantity if isinstance(quantity, int) and not isinstance(quantity, bool) else None,
                price=unit_price,
            ))
        except Exception:
            logger.debug("rejection event not published", exc_info=True)


def _check_quantity(quantity: object, symbol: str) -> None:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise InvalidQuantity(quantity, symbol)


def _canonical_symbol(symbol: object, catalog: Optional[PriceCatalog]) -> str:
    """Validate `symbol` and, when a catalog is given, map it to the catalog's spelling."""
    if not is_valid_symbol(symbol):
        raise InvalidSymbol(symbol)
    if catalog is None:
        return symbol
    stock = catalog.get(symbol)
    if stock is None:
        raise UnknownSymbol(symbol)
    return stock.symbol


def _resolve_price(symbol: str, unit_price: Optional[float], catalog: Optional[PriceCatalog]) -> float:
    if unit_price is None and catalog is not None:
        unit_price = catalog.price(symbol)
    if unit_price is None:
        raise UnknownSymbol(symbol)
    price = float(unit_price)
    if not price > 0:
        raise InvalidPrice(unit_price, symbol)
    return price


def replay(cash: float, transactions: Iterable[Transaction]) -> Ledger:
    """Rebuild cash and holdings by applying `transactions` to a starting cash balance."""
    transactions = list(transactions)
    holdings: Dict[str, int] = {}
    for t in transactions:
        cash += t.cash_delta
        holdings[t.symbol] = holdings.get(t.symbol, 0) + t.qty
        if holdings[t.symbol] < 0:
            raise ValueError(f"replay drives {t.symbol} negative at {t.timestamp.isoformat()}")
        if holdings[t.symbol] == 0:
            del holdings[t.symbol]
    return Ledger(cash=cash, holdings=holdings, history=TransactionLog(transactions))
