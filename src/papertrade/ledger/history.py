from __future__ import annotations

from typing import Dict, Iterable, Iterator, List, Tuple

from .model import Transaction


class TransactionLog:
    """Append-only, creation-ordered record of executed trades."""

    def __init__(self, transactions: Iterable[Transaction] = ()):
        self._items: List[Transaction] = []
        for t in transactions:
            self.append(t)

    def append(self, t: Transaction) -> None:
        if t.qty == 0:
            raise ValueError("transaction quantity must be non-zero")
        if t.price <= 0:
            raise ValueError("transaction price must be positive")
        if (t.type == "BUY") != (t.qty > 0):
            raise ValueError(f"type {t.type} does not match signed qty {t.qty}")
        self._items.append(t)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Transaction]:
        return iter(self._items)

    def __getitem__(self, i: int) -> Transaction:
        return self._items[i]

    def snapshot(self) -> Tuple[Transaction, ...]:
        return tuple(self._items)

    def net_cash_flow(self, since: int = 0) -> float:
        """Cash moved by trades from index `since` onward (buys negative)."""
        return sum(t.cash_delta for t in self._items[since:])

    def net_quantities(self, since: int = 0) -> Dict[str, int]:
        out: Dict[str, int] = {}
        for t in self._items[since:]:
            out[t.symbol] = out.get(t.symbol, 0) + t.qty
        return out