"""
Tabular views of a trading session.

- `transactions_frame`: one row per executed trade, in log order.
- `holdings_frame`: one row per held symbol with catalog price and value.
- `export_transactions_csv`: writes the transaction frame to disk.

Usage:
  PYTHONPATH=src python -m papertrade.reports.generate [portfolio.csv] [out.csv]
"""

from __future__ import annotations

import os
import sys
from typing import Iterable, Optional

import pandas as pd

from ..ledger.ledger import Ledger
from ..ledger.model import Transaction
from ..market.catalog import PriceCatalog

TRANSACTION_COLUMNS = ["timestamp", "symbol", "type", "qty", "price", "notional", "cash_delta"]
HOLDING_COLUMNS = ["symbol", "name", "qty", "price", "value"]


def transactions_frame(transactions: Iterable[Transaction]) -> pd.DataFrame:
    rows = [
        {
            "timestamp": t.timestamp,
            "symbol": t.symbol,
            "type": t.type,
            "qty": t.qty,
            "price": t.price,
            "notional": t.notional,
            "cash_delta": t.cash_delta,
        }
        for t in transactions
    ]
    return pd.DataFrame(rows, columns=TRANSACTION_COLUMNS)


def holdings_frame(ledger: Ledger, catalog: PriceCatalog) -> pd.DataFrame:
    rows = []
    for sym, qty in ledger.holdings.items():
        stock = catalog.get(sym)
        price = stock.price if stock is not None else 0.0
        rows.append({
            "symbol": sym,
            "name": stock.name if stock is not None else "",
            "qty": qty,
            "price": price,
            "value": qty * price,
        })
    return pd.DataFrame(rows, columns=HOLDING_COLUMNS)


def symbol_summary(transactions: Iterable[Transaction]) -> pd.DataFrame:
    """Per-symbol net quantity, shares bought/sold and net cash flow."""
    df = transactions_frame(transactions)
    if df.empty:
        return pd.DataFrame(columns=["symbol", "net_qty", "bought", "sold", "cash_flow"])
    df["bought"] = df["qty"].clip(lower=0)
    df["sold"] = (-df["qty"]).clip(lower=0)
    out = df.groupby("symbol", sort=True).agg(
        net_qty=("qty", "sum"),
        bought=("bought", "sum"),
        sold=("sold", "sum"),
        cash_flow=("cash_delta", "sum"),
    )
    return out.reset_index()


def export_transactions_csv(transactions: Iterable[Transaction], path: str) -> str:
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)
    df = transactions_frame(transactions)
    df["timestamp"] = df["timestamp"].map(lambda ts: ts.isoformat())
    df.to_csv(path, index=False)
    return os.path.abspath(path)


def main(argv: Optional[list] = None) -> None:
    from ..store.portfolio_file import PortfolioStore

    args = list(sys.argv[1:] if argv is None else argv)
    src = args[0] if args else "portfolio.csv"
    out = args[1] if len(args) > 1 else "transactions.csv"
    ledger, transactions = PortfolioStore(src).load()
    print(symbol_summary(transactions).to_string(index=False))
    print(f"Report written to: {export_transactions_csv(transactions, out)}")


if __name__ == "__main__":
    main()
