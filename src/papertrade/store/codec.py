"""
Line-oriented text codec for a saved portfolio.

Format:

    cash,<float>
    holdings
    <symbol>,<int>
    transactions
    <iso8601>,<symbol>,<signed int>,<float>,<BUY|SELL>

Parsing is a three-state machine (cash -> holdings -> transactions) that only
changes state on a line that is exactly a section marker (case-insensitive).
Before the first marker, anything but a `cash,` line is ignored. Blank lines
are ignored everywhere. Malformed section lines are skipped and counted
unless `strict=True`, in which case the first one raises `ParseError`.

Floats are written with `repr`, which Python guarantees to read back to the
same value, so `deserialize(serialize(L, T)) == (L, T)` holds exactly.
"""
from __future__ import annotations

import enum
import logging
import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, List, Optional, Tuple

from ..ledger.errors import ParseError
from ..ledger.history import TransactionLog
from ..ledger.ledger import Ledger
from ..ledger.model import Transaction, is_valid_symbol


logger = logging.getLogger(__name__)

HOLDINGS_MARKER = "holdings"
TRANSACTIONS_MARKER = "transactions"
CASH_PREFIX = "cash,"
TRADE_TYPES = ("BUY", "SELL")


class ParseState(enum.Enum):
    READING_CASH = "cash"
    READING_HOLDINGS = "holdings"
    READING_TRANSACTIONS = "transactions"


@dataclass
class DecodeReport:
    skipped: List[Tuple[int, str]] = field(default_factory=list)
    saw_cash: bool = False


def serialize(ledger: Ledger, transactions: Optional[Iterable[Transaction]] = None) -> str:
    """Encode a ledger and its trades. Raises ValueError for a symbol the format cannot hold."""
    txs = ledger.transactions if transactions is None else transactions
    lines = [f"cash,{ledger.cash!r}", HOLDINGS_MARKER]
    for sym, qty in ledger.holdings.items():
        _check_encodable(sym)
        lines.append(f"{sym},{qty}")
    lines.append(TRANSACTIONS_MARKER)
    for t in txs:
        _check_encodable(t.symbol)
        lines.append(encode_transaction(t))
    return "\n".join(lines) + "\n"


def _check_encodable(symbol: str) -> None:
    if not is_valid_symbol(symbol):
        raise ValueError(f"symbol cannot be saved: {symbol!r}")


def encode_transaction(t: Transaction) -> str:
    return f"{t.timestamp.isoformat()},{t.symbol},{t.qty},{t.price!r},{t.type}"


def deserialize(
    text: str,
    strict: bool = False,
    default_cash: float = 0.0,
    report: Optional[DecodeReport] = None,
) -> Tuple[Ledger, List[Transaction]]:
    """Parse saved text into a Ledger and its transaction list.

    `default_cash` is used when no `cash,` line is present. Pass a
    `DecodeReport` to learn which lines were skipped.
    """
    rep = report if report is not None else DecodeReport()
    state = ParseState.READING_CASH
    cash = float(default_cash)
    holdings: dict = {}
    transactions: List[Transaction] = []

    def skip(line_no: int, line: str, why: str) -> None:
        if strict:
            raise ParseError(line_no, line, why)
        rep.skipped.append((line_no, line))
        logger.warning(f"skipping line {line_no} ({why}): {line!r}")

    for line_no, raw in enumerate(text.splitlines(), start=1):
        line = raw.strip()
        if not line:
            continue
        marker = line.lower()
        if marker == HOLDINGS_MARKER:
            state = ParseState.READING_HOLDINGS
            continue
        if marker == TRANSACTIONS_MARKER:
            state = ParseState.READING_TRANSACTIONS
            continue

        if state is ParseState.READING_CASH:
            if line.startswith(CASH_PREFIX):
                try:
                    value = float(line[len(CASH_PREFIX):])
                except ValueError:
                    skip(line_no, line, "bad cash value")
                    continue
                if not math.isfinite(value):
                    skip(line_no, line, "non-finite cash value")
                    continue
                cash = value
                rep.saw_cash = True
            continue

        if state is ParseState.READING_HOLDINGS:
            parts = line.split(",")
            if len(parts) != 2:
                skip(line_no, line, "expected symbol,quantity")
                continue
            sym = parts[0].strip()
            try:
                qty = int(parts[1])
            except ValueError:
                skip(line_no, line, "bad quantity")
                continue
            if not sym or qty <= 0:
                skip(line_no, line, "empty symbol or non-positive quantity")
                continue
            holdings[sym] = qty
            continue

        tx = _decode_transaction(line)
        if isinstance(tx, str):
            skip(line_no, line, tx)
            continue
        transactions.append(tx)

    if not rep.saw_cash:
        logger.warning(f"no cash line; using default cash {cash!r}")
    ledger = Ledger(cash=cash, holdings=holdings, history=TransactionLog(transactions))
    if rep.skipped:
        logger.info(f"decoded portfolio with {len(rep.skipped)} skipped line(s)")
    return ledger, transactions


def _decode_transaction(line: str):
    """Return a Transaction, or a short reason string when the line is malformed."""
    parts = line.split(",")
    if len(parts) != 5:
        return "expected 5 fields"
    ts_raw, sym, qty_raw, price_raw, kind = (p.strip() for p in parts)
    try:
        ts = datetime.fromisoformat(ts_raw)
    except ValueError:
        return "bad timestamp"
    try:
        qty = int(qty_raw)
        price = float(price_raw)
    except ValueError:
        return "bad quantity or price"
    kind = kind.upper()
    if kind not in TRADE_TYPES:
        return "unknown trade type"
    if qty == 0 or not price > 0:
        return "zero quantity or non-positive price"
    if (kind == "BUY") != (qty > 0):
        return "type does not match quantity sign"
    if not sym:
        return "empty symbol"
    return Transaction(timestamp=ts, symbol=sym, qty=qty, price=price, type=kind)
