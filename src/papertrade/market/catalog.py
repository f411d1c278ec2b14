from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Dict, Iterable, Iterator, List, Optional


@dataclass(frozen=True)
class Stock:
    symbol: str
    name: str
    price: float


DEFAULT_STOCKS: List[Stock] = [
    Stock("INFY", "Infosys Ltd", 1400.00),
    Stock("TCS", "Tata Consultancy", 3200.00),
    Stock("RELI", "Reliance Industries", 2900.00),
    Stock("HDFC", "HDFC Bank", 1500.00),
    Stock("ICIC", "ICICI Bank", 1000.00),
]


class PriceCatalog:
    """Symbol -> Stock lookup with stable listing order.

    Prices only change through `with_prices`, which returns a new catalog;
    the drift simulator is the one caller that does this.
    """

    def __init__(self, stocks: Iterable[Stock] = ()):
        self._stocks: Dict[str, Stock] = {}
        for s in stocks:
            key = s.symbol.upper()
            if s.price <= 0:
                raise ValueError(f"price must be positive for {key}: {s.price}")
            self._stocks[key] = Stock(key, s.name, float(s.price))

    @classmethod
    def default(cls) -> "PriceCatalog":
        return cls(DEFAULT_STOCKS)

    def __contains__(self, symbol: object) -> bool:
        return isinstance(symbol, str) and symbol.upper() in self._stocks

    def __iter__(self) -> Iterator[Stock]:
        return iter(self._stocks.values())

    def __len__(self) -> int:
        return len(self._stocks)

    def get(self, symbol: str) -> Optional[Stock]:
        return self._stocks.get(symbol.upper())

    def price(self, symbol: str, default: Optional[float] = None) -> Optional[float]:
        s = self.get(symbol)
        return s.price if s is not None else default

    def symbols(self) -> List[str]:
        return list(self._stocks.keys())

    def prices(self) -> Dict[str, float]:
        return {sym: s.price for sym, s in self._stocks.items()}

    def with_prices(self, price_by_symbol: Dict[str, float]) -> "PriceCatalog":
        return PriceCatalog(
            replace(s, price=float(price_by_symbol.get(sym, s.price))) for sym, s in self._stocks.items()
        )
