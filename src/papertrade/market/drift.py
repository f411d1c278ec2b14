from __future__ import annotations

import logging
import random
from typing import Dict, Optional, Protocol

from .catalog import PriceCatalog
from ..metrics.trading import get_drift_applied_total


logger = logging.getLogger(__name__)


class UniformSource(Protocol):
    def uniform(self, a: float, b: float) -> float: ...


class DriftSimulator:
    """Random bounded price drift.

    Each call draws one percentage per stock, in catalog order, uniformly in
    [-max_pct, +max_pct] and floors the moved price at `min_price`.
    """

    def __init__(self, rng: Optional[UniformSource] = None, max_pct: float = 0.05, min_price: float = 1.0):
        if max_pct < 0:
            raise ValueError(f"max_pct must be >= 0, got {max_pct}")
        if min_price <= 0:
            raise ValueError(f"min_price must be > 0, got {min_price}")
        self.rng = rng if rng is not None else random.Random()
        self.max_pct = float(max_pct)
        self.min_price = float(min_price)
        self.drift_applied = get_drift_applied_total()

    def apply(self, catalog: PriceCatalog) -> PriceCatalog:
        moved: Dict[str, float] = {}
        for stock in catalog:
            pct = float(self.rng.uniform(-self.max_pct, self.max_pct))
            moved[stock.symbol] = max(self.min_price, stock.price * (1.0 + pct))
            logger.debug(f"drift {stock.symbol}: {stock.price:.4f} -> {moved[stock.symbol]:.4f} ({pct:+.4%})")
        self.drift_applied.inc()
        return catalog.with_prices(moved)
